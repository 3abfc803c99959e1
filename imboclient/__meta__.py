# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "imboclient"
__summary__ = "Content hashing and request signing for the Imbo image server."
__url__ = "https://github.com/imbo/imboclient-python"

__version__ = "0.1.0"

__install_requires__ = ["fs>=2.4.16", "requests>=2.20", "setuptools<81"]
__tests_require__ = ["pytest", "tox"]

__author__ = "Espen Hovlandsdal"
__email__ = "espen@hovlandsdal.com"

__license__ = "MIT License"
