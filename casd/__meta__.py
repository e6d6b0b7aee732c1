# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "casd"
__summary__ = "Copy files into a content-addressed directory named by their hash."

__version__ = "0.1.0"

__install_requires__ = ["anyio>=4", "blake3>=0.4"]
__tests_require__ = ["pytest>=8"]

__author__ = "Weedon & Scott Studios"
__email__ = "Studios@WeedonAndScott.com"

__license__ = "MIT License"
