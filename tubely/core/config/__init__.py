__all__ = [
    "AuthSettings",
    "LoggingSettings",
    "MediaSettings",
    "ObjectSettings",
    "Secrets",
    "Settings",
    "StorageSettings",
    "ToolSettings",
    "TubelyWebSettings",
    "UploadSettings",
    "WebSettings",
]


from .logging import LoggingSettings
from .media import MediaSettings, ToolSettings
from .secrets import Secrets
from .settings import Settings
from .storage import ObjectSettings, StorageSettings
from .web import AuthSettings, TubelyWebSettings, UploadSettings, WebSettings
