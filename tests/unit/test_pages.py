"""
pages/ 單元測試

LoginPage / DashboardPage 的流程邏輯；locator 以 MagicMock 取代。
"""

from unittest.mock import MagicMock, patch

import pytest

from core.exceptions import ElementNotFoundError, PageNotLoadedError
from pages.dashboard_page import DashboardPage
from pages.login_page import LoginPage


def make_page(cls, url="https://example.com/login"):
    driver = MagicMock()
    driver.current_url = url
    page = cls(driver, timeout=1)
    page.locator = MagicMock()
    return page


@pytest.mark.unit
class TestLoginPage:

    @pytest.mark.unit
    def test_goto_uses_login_url(self):
        page = make_page(LoginPage)
        with patch("pages.login_page.Config") as cfg, \
                patch.object(LoginPage, "wait_for_dom_ready"):
            cfg.login_url.return_value = "https://portal/login"
            assert page.goto() is page
        page.driver.get.assert_called_once_with("https://portal/login")

    @pytest.mark.unit
    def test_login_enters_id_then_clicks(self):
        page = make_page(LoginPage)
        element = page.locator.locate.return_value

        page.login("1111111111")

        element.send_keys.assert_called_once_with("1111111111")
        element.click.assert_called_once()
        descriptors = [c.args[0] for c in page.locator.locate.call_args_list]
        assert descriptors == [LoginPage.SAUDI_ID_INPUT, LoginPage.LOGIN_BUTTON]

    @pytest.mark.unit
    def test_has_login_error_text(self):
        page = make_page(LoginPage)
        page.locator.locate.return_value.text = " Invalid ID "
        assert page.has_login_error() == "Invalid ID"

    @pytest.mark.unit
    def test_has_login_error_none(self):
        page = make_page(LoginPage)
        page.locator.locate.side_effect = ElementNotFoundError("LoginError")
        assert page.has_login_error() is None

    @pytest.mark.unit
    def test_empty_error_element_is_none(self):
        page = make_page(LoginPage)
        page.locator.locate.return_value.text = "   "
        assert page.has_login_error() is None

    @pytest.mark.unit
    def test_login_page_displayed(self):
        page = make_page(LoginPage, url="https://example.com/LOGIN")
        page.locator.exists.return_value = True
        assert page.is_login_page_displayed() is True

    @pytest.mark.unit
    def test_login_page_not_displayed_elsewhere(self):
        page = make_page(LoginPage, url="https://example.com/home")
        page.locator.exists.return_value = True
        assert page.is_login_page_displayed() is False


@pytest.mark.unit
class TestDashboardPage:

    @pytest.mark.unit
    def test_get_user_name(self):
        page = make_page(DashboardPage, url="https://example.com/home")
        page.locator.locate.return_value.text = "Welcome Ahmed"
        assert page.get_user_name() == "Ahmed"

    @pytest.mark.unit
    def test_get_user_name_missing_raises(self):
        page = make_page(DashboardPage)
        page.locator.locate.side_effect = ElementNotFoundError("WelcomeHeading")
        with pytest.raises(ElementNotFoundError):
            page.get_user_name()

    @pytest.mark.unit
    def test_wait_for_page_load_never_raises(self):
        page = make_page(DashboardPage)
        page.locator.locate.side_effect = ElementNotFoundError("WelcomeHeading")
        with patch.object(DashboardPage, "wait_for_dom_ready",
                          side_effect=PageNotLoadedError("DashboardPage")):
            page.wait_for_page_load()

    @pytest.mark.unit
    def test_verify_welcome_message(self):
        page = make_page(DashboardPage)
        page.locator.locate.return_value.text = "Welcome Ahmed"
        assert page.verify_welcome_message() is True
        # 名稱不符只記警告
        assert page.verify_welcome_message("Sara") is True

    @pytest.mark.unit
    def test_verify_welcome_message_missing(self):
        page = make_page(DashboardPage)
        page.locator.locate.side_effect = ElementNotFoundError("WelcomeHeading")
        assert page.verify_welcome_message() is False

    @pytest.mark.unit
    def test_successful_login_when_input_gone(self):
        page = make_page(DashboardPage, url="https://example.com/home")
        page.locator.exists.return_value = False
        assert page.verify_successful_login() is True

    @pytest.mark.unit
    def test_still_on_login_page(self):
        """輸入框仍在且 URL 含 /login → False"""
        page = make_page(DashboardPage, url="https://example.com/login")
        page.locator.exists.return_value = True
        with patch.object(DashboardPage, "wait_for_page_load"):
            assert page.verify_successful_login() is False

    @pytest.mark.unit
    def test_left_login_url_counts_as_success(self):
        page = make_page(DashboardPage, url="https://example.com/profile")
        page.locator.exists.return_value = True
        with patch.object(DashboardPage, "wait_for_page_load"):
            assert page.verify_successful_login() is True

    @pytest.mark.unit
    def test_input_disappears_after_wait(self):
        page = make_page(DashboardPage, url="https://example.com/login")
        page.locator.exists.side_effect = [True, False]
        with patch.object(DashboardPage, "wait_for_page_load") as wait:
            assert page.verify_successful_login() is True
        wait.assert_called_once()
