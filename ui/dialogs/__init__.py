# Dialogs package for MediaLens
# Provides reusable dialog widgets

from .json_dialog import JsonDialog

__all__ = ['JsonDialog']
