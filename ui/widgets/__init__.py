from .list_view import ListView
from .details_view import DetailsView
from .about_view import AboutView
from .settings_view import SettingsView
from .status_bar import StatusBar
from .tab_manager import TabManager

__all__ = [
    'ListView',
    'DetailsView',
    'AboutView',
    'SettingsView',
    'StatusBar',
    'TabManager'
]
