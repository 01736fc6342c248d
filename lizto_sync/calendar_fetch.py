"""
Drive the Lizto web calendar with Selenium.

Workflow:
1. Open Chrome (headless on servers) and log in with email + password
2. Open the calendar; the current week is displayed by default
3. For each visible appointment card: read its HTML, hover it, wait for the
   tooltip to settle, read the tooltip HTML
4. Optionally click "next week" and repeat

The tooltip is one shared menu on the page: hovering two cards at once would
mix their details, so every call here runs strictly one after another.
"""
from __future__ import annotations

import logging
import time
from typing import List

from selenium import webdriver
from selenium.common.exceptions import (
    NoSuchElementException,
    StaleElementReferenceException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.action_chains import ActionChains
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webelement import WebElement
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from .calendar_html import (
    CARD_CLASS,
    RawCardFields,
    RawOverlayLines,
    parse_card_html,
    parse_overlay_html,
)

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────
#  Constants
# ──────────────────────────────────────────────────────────────────

LIZTO_LOGIN_URL = "https://app.lizto.co/login"
LIZTO_CALENDAR_URL = "https://app.lizto.co/calendar"

EMAIL_INPUT_ID = "email"
PASSWORD_SELECTOR = 'input[type="password"]'
SUBMIT_BTN_ID = "button-manual-submit"

CALENDAR_BODY_SELECTOR = ".v-calendar-daily__body"
EVENT_SELECTOR = ".v-calendar-daily__body .v-event-timed.primary.white--text"
OVERLAY_SELECTOR = "div.v-menu__content.menuable__content__active"
NEXT_WEEK_SELECTOR = "button.py-0.ivu-btn.ivu-btn-default span strong.mx-2 i.fa-angle-right"

DEFAULT_SETTLE_DELAY = 0.25
DEFAULT_NAVIGATION_DELAY = 2.0
CALENDAR_LOAD_DELAY = 3.0
WAIT_TIMEOUT = 15


class LoginError(RuntimeError):
    """Login or initial calendar navigation failed."""


# ──────────────────────────────────────────────────────────────────
#  Helpers
# ──────────────────────────────────────────────────────────────────

def create_driver(headless: bool = True) -> webdriver.Chrome:
    """Create a Chrome WebDriver instance."""
    options = Options()
    if headless:
        options.add_argument("--headless=new")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-setuid-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-gpu")
    options.add_argument("--window-size=1600,1200")
    try:
        service = Service(ChromeDriverManager().install())
        return webdriver.Chrome(service=service, options=options)
    except Exception as e:
        raise RuntimeError(
            f"Could not start Chrome. Install Chrome and run again.\nError: {e}"
        ) from e


# ──────────────────────────────────────────────────────────────────
#  Session
# ──────────────────────────────────────────────────────────────────

class CalendarSession:
    """One logged-in browser page, reused by every sync pass."""

    def __init__(
        self,
        driver: webdriver.Chrome,
        email: str,
        password: str,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        navigation_delay: float = DEFAULT_NAVIGATION_DELAY,
    ):
        self.driver = driver
        self.email = email
        self.password = password
        self.settle_delay = settle_delay
        self.navigation_delay = navigation_delay

    def login(self) -> None:
        """Fill the login form and open the calendar. Raises LoginError."""
        logger.info("Opening Lizto login page")
        try:
            self.driver.get(LIZTO_LOGIN_URL)
            wait = WebDriverWait(self.driver, WAIT_TIMEOUT)

            email_input = wait.until(EC.presence_of_element_located((By.ID, EMAIL_INPUT_ID)))
            email_input.send_keys(self.email)
            password_input = wait.until(
                EC.presence_of_element_located((By.CSS_SELECTOR, PASSWORD_SELECTOR))
            )
            password_input.send_keys(self.password)

            # The login page may have redirected (query string, trailing slash)
            form_url = self.driver.current_url
            self.driver.find_element(By.ID, SUBMIT_BTN_ID).click()
            logger.info("Signing in...")
            wait.until(EC.url_changes(form_url))
        except (TimeoutException, NoSuchElementException, WebDriverException) as e:
            raise LoginError(f"Login failed: {e}") from e
        logger.info("Signed in to Lizto")
        self.open_calendar()

    def open_calendar(self) -> None:
        logger.info("Opening calendar")
        try:
            self.driver.get(LIZTO_CALENDAR_URL)
        except WebDriverException as e:
            raise LoginError(f"Could not open calendar: {e}") from e
        time.sleep(CALENDAR_LOAD_DELAY)

    def visible_events(self) -> List[WebElement]:
        """All appointment cards on screen, in document order."""
        WebDriverWait(self.driver, WAIT_TIMEOUT).until(
            EC.presence_of_element_located((By.CSS_SELECTOR, CALENDAR_BODY_SELECTOR))
        )
        return self.driver.find_elements(By.CSS_SELECTOR, EVENT_SELECTOR)

    def read_card(self, element: WebElement) -> RawCardFields | None:
        html = element.get_attribute("outerHTML") or ""
        try:
            color = element.find_element(By.CLASS_NAME, CARD_CLASS).value_of_css_property(
                "background-color"
            )
        except NoSuchElementException:
            color = ""
        return parse_card_html(html, background_color=color)

    def reveal(self, element: WebElement) -> RawOverlayLines:
        """
        Hover the card and read whatever tooltip is showing after the settle
        delay. The tooltip renders asynchronously: an empty or stale result is
        possible and is returned as-is.
        """
        ActionChains(self.driver).move_to_element(element).perform()
        time.sleep(self.settle_delay)

        tooltips = self.driver.find_elements(By.CSS_SELECTOR, OVERLAY_SELECTOR)
        if not tooltips:
            return ()
        try:
            html = tooltips[0].get_attribute("outerHTML")
        except StaleElementReferenceException:
            return ()
        return parse_overlay_html(html)

    def next_week(self) -> None:
        """Click the "next week" arrow and wait for the grid to re-render."""
        self.driver.find_element(By.CSS_SELECTOR, NEXT_WEEK_SELECTOR).click()
        time.sleep(self.navigation_delay)

    def close(self) -> None:
        try:
            self.driver.quit()
        except WebDriverException as e:
            logger.warning("Error closing browser: %s", e)
        else:
            logger.info("Browser closed")
