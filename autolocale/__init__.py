"""
Autolocale - automatic DeepL translation for localized CMS collections.
"""

__version__ = "0.1.0"
