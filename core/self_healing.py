"""
Locator Self-Healing - 多策略元素定位

一個 LocatorDescriptor 描述「同一個元素」的多種找法，
SelfHealingLocator 依序嘗試，回傳第一個找到且可見的元素。

流程：
    role + text (語意定位)
    → CSS selector
    → XPath
    → 全部失敗 → ElementNotFoundError

學習機制：
    某個 identifier 上次成功的策略，下次會排到最前面先試。
    非首選策略成功時會留下 HealRecord，方便事後更新 locator。

用法：
    from core.self_healing import LocatorDescriptor, SelfHealingLocator

    WELCOME = LocatorDescriptor(
        identifier="WelcomeHeading",
        role="heading",
        text="Welcome",
        css="h3.user-name-welcome, .welcome-message",
        xpath='//h1[contains(text(), "Welcome")]',
    )
    element = SelfHealingLocator(driver).locate(WELCOME)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from core.exceptions import ElementNotFoundError
from utils.logger import logger

if TYPE_CHECKING:
    from selenium.webdriver.remote.webdriver import WebDriver
    from selenium.webdriver.remote.webelement import WebElement


@dataclass(frozen=True)
class LocatorDescriptor:
    """同一個元素的多種定位方式，只作為查找輸入"""
    identifier: str
    role: str | None = None
    text: str | None = None
    css: str | None = None
    xpath: str | None = None


@dataclass
class HealRecord:
    """一次備援策略成功的記錄"""
    identifier: str
    preferred_strategy: str
    healed_strategy: str
    healed_locator: tuple[str, str]
    page_url: str
    timestamp: float = field(default_factory=time.time)

    @property
    def suggestion(self) -> str:
        by, value = self.healed_locator
        return (
            f"建議更新 {self.identifier}: ({by!r}, {value!r})  "
            f"# {self.preferred_strategy} 失效，改用 {self.healed_strategy}"
        )


# ── 策略：descriptor → (by, value) 或 None（descriptor 沒提供此資訊）──

_ROLE_PREDICATES = {
    "heading": "self::h1 or self::h2 or self::h3 or self::h4 or self::h5 or self::h6",
    "button": "self::button or (self::input and (@type='submit' or @type='button'))",
    "textbox": (
        "self::textarea or (self::input and (not(@type) or @type='text' "
        "or @type='tel' or @type='number' or @type='email' or @type='search'))"
    ),
    "link": "self::a[@href]",
    "alert": "self::*[contains(@class, 'alert') or contains(@class, 'error')]",
}

_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_LOWER = "abcdefghijklmnopqrstuvwxyz"


def xpath_literal(value: str) -> str:
    """把任意字串轉成 XPath 字串常值（處理單雙引號混用）"""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def _contains_ci(expr: str, text: str) -> str:
    return (
        f"contains(translate({expr}, '{_UPPER}', '{_LOWER}'), "
        f"{xpath_literal(text.lower())})"
    )


def role_text_locator(descriptor: LocatorDescriptor) -> tuple[str, str] | None:
    """依 ARIA role（含對應的原生標籤）與可見文字組出 XPath"""
    if not descriptor.role:
        return None
    role = descriptor.role.lower()
    predicate = f"@role={xpath_literal(role)}"
    native = _ROLE_PREDICATES.get(role)
    if native:
        predicate = f"{native} or {predicate}"
    xpath = f"//*[{predicate}]"

    if descriptor.text:
        text_match = " or ".join(
            _contains_ci(expr, descriptor.text)
            for expr in ("normalize-space(.)", "@aria-label", "@placeholder", "@value")
        )
        xpath += f"[{text_match}]"
    return (By.XPATH, xpath)


def css_locator(descriptor: LocatorDescriptor) -> tuple[str, str] | None:
    return (By.CSS_SELECTOR, descriptor.css) if descriptor.css else None


def xpath_locator(descriptor: LocatorDescriptor) -> tuple[str, str] | None:
    return (By.XPATH, descriptor.xpath) if descriptor.xpath else None


Strategy = Callable[[LocatorDescriptor], "tuple[str, str] | None"]

DEFAULT_STRATEGIES: list[tuple[str, Strategy]] = [
    ("role_text", role_text_locator),
    ("css", css_locator),
    ("xpath", xpath_locator),
]


class SelfHealingLocator:
    """
    依序嘗試多種策略的元素定位器

    Args:
        driver: Selenium WebDriver
        timeout: 每個策略的等待秒數
        strategies: [(名稱, 策略函式)]，排在前面的優先
    """

    # 類級別共享：修復歷史（限制容量）與每個 identifier 學到的策略
    _heal_history: list[HealRecord] = []
    _max_history: int = 500
    _learned: dict[str, str] = {}

    def __init__(
        self,
        driver: "WebDriver",
        timeout: float = 3.0,
        strategies: list[tuple[str, Strategy]] | None = None,
    ):
        self._driver = driver
        self._timeout = timeout
        self._strategies = strategies or DEFAULT_STRATEGIES

    def candidates(self, descriptor: LocatorDescriptor) -> list[tuple[str, tuple[str, str]]]:
        """依優先順序產生 (策略名稱, locator)；學到的策略排最前面"""
        ordered = list(self._strategies)
        learned = self._learned.get(descriptor.identifier)
        if learned:
            ordered.sort(key=lambda item: item[0] != learned)

        result = []
        for name, strategy in ordered:
            locator = strategy(descriptor)
            if locator is not None:
                result.append((name, locator))
        return result

    def locate(self, descriptor: LocatorDescriptor, timeout: float | None = None) -> "WebElement":
        """
        找到第一個可見的元素

        Raises:
            ElementNotFoundError: 所有策略都失敗
        """
        timeout = self._timeout if timeout is None else timeout
        candidates = self.candidates(descriptor)
        tried = []

        for name, locator in candidates:
            tried.append(name)
            try:
                element = WebDriverWait(self._driver, timeout).until(
                    EC.visibility_of_element_located(locator)
                )
            except Exception as e:
                logger.debug(
                    f"[SelfHealing] {descriptor.identifier} 策略 {name} 失敗: "
                    f"{type(e).__name__}"
                )
                continue

            self._on_success(descriptor, name, locator, first_choice=candidates[0][0])
            return element

        logger.warning(
            f"[SelfHealing] 所有策略均無法找到 {descriptor.identifier}: {tried}"
        )
        raise ElementNotFoundError(descriptor.identifier, tried)

    def exists(self, descriptor: LocatorDescriptor, timeout: float | None = None) -> bool:
        """元素是否存在且可見（不拋出例外）"""
        try:
            self.locate(descriptor, timeout)
            return True
        except ElementNotFoundError:
            return False

    def _on_success(self, descriptor: LocatorDescriptor, name: str,
                    locator: tuple[str, str], first_choice: str) -> None:
        SelfHealingLocator._learned[descriptor.identifier] = name
        if name == first_choice:
            return

        record = HealRecord(
            identifier=descriptor.identifier,
            preferred_strategy=first_choice,
            healed_strategy=name,
            healed_locator=locator,
            page_url=self._page_url(),
        )
        SelfHealingLocator._append_history(record)
        logger.warning(f"[SelfHealing] 自動修復成功! {record.suggestion}")

    def _page_url(self) -> str:
        try:
            return self._driver.current_url or ""
        except Exception:
            return ""

    # ── 類方法 ──

    @classmethod
    def _append_history(cls, record: HealRecord) -> None:
        cls._heal_history.append(record)
        if len(cls._heal_history) > cls._max_history:
            cls._heal_history = cls._heal_history[-cls._max_history:]

    @classmethod
    def history(cls) -> list[HealRecord]:
        return list(cls._heal_history)

    @classmethod
    def get_report(cls) -> str:
        """產生修復報告"""
        if not cls._heal_history:
            return "無自動修復記錄"

        lines = [
            "",
            "=" * 70,
            "  Locator 自動修復報告",
            "=" * 70,
        ]
        for i, record in enumerate(cls._heal_history, 1):
            lines.extend([
                f"\n  [{i}] {record.identifier} ({record.page_url})",
                f"      首選: {record.preferred_strategy}",
                f"      修復: {record.healed_strategy} -> {record.healed_locator}",
                f"      {record.suggestion}",
            ])
        lines.append("=" * 70)
        return "\n".join(lines)

    @classmethod
    def clear_history(cls) -> None:
        """清除修復歷史與學習結果"""
        cls._heal_history.clear()
        cls._learned.clear()
