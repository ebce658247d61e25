from .activator import Activator, LoaderExtension, SysPathLoaderExtension, module_available

__all__ = ["Activator", "LoaderExtension", "SysPathLoaderExtension", "module_available"]
