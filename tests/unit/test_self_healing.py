"""
core/self_healing.py 單元測試

驗證策略產生、依序嘗試、學習機制與修復歷史。
WebDriverWait 以只檢查一次的假物件取代，不依賴真實瀏覽器。
"""

from unittest.mock import MagicMock, patch

import pytest
from selenium.common.exceptions import NoSuchElementException, TimeoutException
from selenium.webdriver.common.by import By

from core.exceptions import ElementNotFoundError
from core.self_healing import (
    HealRecord,
    LocatorDescriptor,
    SelfHealingLocator,
    css_locator,
    role_text_locator,
    xpath_literal,
    xpath_locator,
)

BUTTON = LocatorDescriptor(
    identifier="LoginButton",
    role="button",
    text="Login",
    css="button[type='submit']",
    xpath="//button[contains(., 'Login')]",
)


class OneShotWait:
    """只評估條件一次的 WebDriverWait 替身"""

    def __init__(self, driver, timeout):
        self.driver = driver

    def until(self, condition):
        value = condition(self.driver)
        if not value:
            raise TimeoutException("not visible")
        return value


def make_driver(visible_values):
    """只有 value 在 visible_values 裡的 locator 找得到（且可見）"""
    driver = MagicMock()
    driver.current_url = "https://example.com/login"
    element = MagicMock()
    element.is_displayed.return_value = True

    def find_element(by, value):
        if value in visible_values:
            return element
        raise NoSuchElementException(value)

    driver.find_element.side_effect = find_element
    return driver, element


@pytest.fixture(autouse=True)
def clear_history():
    """每個測試前清空歷史"""
    SelfHealingLocator.clear_history()
    with patch("core.self_healing.WebDriverWait", OneShotWait):
        yield
    SelfHealingLocator.clear_history()


@pytest.mark.unit
class TestStrategies:
    """descriptor → locator"""

    @pytest.mark.unit
    def test_role_text_includes_native_tags(self):
        by, xpath = role_text_locator(BUTTON)
        assert by == By.XPATH
        assert "self::button" in xpath
        assert "@role='button'" in xpath
        assert "'login'" in xpath

    @pytest.mark.unit
    def test_role_without_text(self):
        _, xpath = role_text_locator(LocatorDescriptor("x", role="heading"))
        assert "self::h1" in xpath
        assert "translate" not in xpath

    @pytest.mark.unit
    def test_missing_fields_give_none(self):
        empty = LocatorDescriptor("x")
        assert role_text_locator(empty) is None
        assert css_locator(empty) is None
        assert xpath_locator(empty) is None

    @pytest.mark.unit
    @pytest.mark.parametrize("value, expected", [
        ("plain", "'plain'"),
        ("it's", '"it\'s"'),
        ("a'b\"c", "concat('a', \"'\", 'b\"c')"),
    ])
    def test_xpath_literal(self, value, expected):
        assert xpath_literal(value) == expected


@pytest.mark.unit
class TestCandidates:

    @pytest.mark.unit
    def test_default_order(self):
        names = [name for name, _ in SelfHealingLocator(MagicMock()).candidates(BUTTON)]
        assert names == ["role_text", "css", "xpath"]

    @pytest.mark.unit
    def test_skips_unavailable_strategies(self):
        desc = LocatorDescriptor("x", css=".a")
        assert SelfHealingLocator(MagicMock()).candidates(desc) == [
            ("css", (By.CSS_SELECTOR, ".a")),
        ]


@pytest.mark.unit
class TestLocate:

    @pytest.mark.unit
    def test_first_strategy_no_history(self):
        _, role_xpath = role_text_locator(BUTTON)
        driver, element = make_driver({role_xpath})

        assert SelfHealingLocator(driver, timeout=0).locate(BUTTON) is element
        assert SelfHealingLocator.history() == []

    @pytest.mark.unit
    def test_fallback_records_heal(self):
        """首選失敗、CSS 成功 → 留下 HealRecord"""
        driver, element = make_driver({BUTTON.css})

        assert SelfHealingLocator(driver, timeout=0).locate(BUTTON) is element

        history = SelfHealingLocator.history()
        assert len(history) == 1
        record = history[0]
        assert record.identifier == "LoginButton"
        assert record.preferred_strategy == "role_text"
        assert record.healed_strategy == "css"
        assert record.healed_locator == (By.CSS_SELECTOR, BUTTON.css)
        assert record.page_url == "https://example.com/login"

    @pytest.mark.unit
    def test_learned_strategy_tried_first(self):
        """學到 CSS 之後，下次 CSS 排第一，且不再記錄修復"""
        driver, _ = make_driver({BUTTON.css})
        locator = SelfHealingLocator(driver, timeout=0)
        locator.locate(BUTTON)
        driver.find_element.reset_mock()

        locator.locate(BUTTON)

        assert [name for name, _ in locator.candidates(BUTTON)][0] == "css"
        assert driver.find_element.call_count == 1
        assert len(SelfHealingLocator.history()) == 1

    @pytest.mark.unit
    def test_all_fail(self):
        driver, _ = make_driver(set())
        with pytest.raises(ElementNotFoundError) as exc_info:
            SelfHealingLocator(driver, timeout=0).locate(BUTTON)
        assert exc_info.value.tried == ["role_text", "css", "xpath"]
        assert exc_info.value.identifier == "LoginButton"

    @pytest.mark.unit
    def test_hidden_element_not_returned(self):
        driver, element = make_driver({BUTTON.css})
        element.is_displayed.return_value = False
        assert SelfHealingLocator(driver, timeout=0).exists(BUTTON) is False

    @pytest.mark.unit
    def test_exists(self):
        driver, _ = make_driver({BUTTON.xpath})
        assert SelfHealingLocator(driver, timeout=0).exists(BUTTON) is True


@pytest.mark.unit
class TestHistory:

    @pytest.mark.unit
    def test_report_empty(self):
        assert SelfHealingLocator.get_report() == "無自動修復記錄"

    @pytest.mark.unit
    def test_report_contains_suggestion(self):
        driver, _ = make_driver({BUTTON.xpath})
        SelfHealingLocator(driver, timeout=0).locate(BUTTON)
        report = SelfHealingLocator.get_report()
        assert "LoginButton" in report
        assert "xpath" in report

    @pytest.mark.unit
    def test_history_capped(self):
        with patch.object(SelfHealingLocator, "_max_history", 3):
            for i in range(5):
                SelfHealingLocator._append_history(HealRecord(
                    identifier=f"el{i}", preferred_strategy="role_text",
                    healed_strategy="css", healed_locator=("css selector", ".x"),
                    page_url="",
                ))
            assert [r.identifier for r in SelfHealingLocator.history()] == ["el2", "el3", "el4"]

    @pytest.mark.unit
    def test_clear_history_forgets_learned(self):
        driver, _ = make_driver({BUTTON.css})
        locator = SelfHealingLocator(driver, timeout=0)
        locator.locate(BUTTON)
        SelfHealingLocator.clear_history()
        assert locator.candidates(BUTTON)[0][0] == "role_text"

    @pytest.mark.unit
    def test_suggestion_format(self):
        record = HealRecord("Btn", "role_text", "xpath", ("xpath", "//button"), "")
        assert "//button" in record.suggestion
        assert "role_text" in record.suggestion
        assert record.timestamp > 0
