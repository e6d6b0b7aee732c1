from casd.cli import casd_main

if __name__ == "__main__":
    raise SystemExit(casd_main())
