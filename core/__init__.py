"""
core - 框架核心

統一匯出所有核心元件，方便外部 import。

用法：
    from core import BasePage, DriverManager
    from core import LocatorDescriptor, SelfHealingLocator
    from core import ElementNotFoundError, ScannerUnavailableError
"""

from core.base_page import BasePage
from core.driver_manager import DriverManager
from core.exceptions import (
    DriverConnectionError,
    DriverError,
    DriverNotInitializedError,
    ElementNotFoundError,
    PageError,
    PageNotLoadedError,
    PortalTestError,
    ScanApiError,
    ScanCancelledError,
    ScannerError,
    ScannerUnavailableError,
    ScanTimeoutError,
    TestDataError,
)
from core.self_healing import HealRecord, LocatorDescriptor, SelfHealingLocator

__all__ = [
    # Driver / Page
    "DriverManager",
    "BasePage",
    # Locator
    "LocatorDescriptor",
    "SelfHealingLocator",
    "HealRecord",
    # Exceptions
    "PortalTestError",
    "DriverError",
    "DriverNotInitializedError",
    "DriverConnectionError",
    "PageError",
    "ElementNotFoundError",
    "PageNotLoadedError",
    "TestDataError",
    "ScannerError",
    "ScannerUnavailableError",
    "ScanApiError",
    "ScanTimeoutError",
    "ScanCancelledError",
]
