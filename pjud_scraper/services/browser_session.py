"""Selenium-backed browser session used by the navigator and extractor.

The session is the only place that talks to Selenium. It exposes a small set
of element operations addressed by CSS selector and converts driver errors
into the scraper's failure kinds.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode, urljoin

from selenium import webdriver
from selenium.common.exceptions import NoSuchElementException
from selenium.common.exceptions import StaleElementReferenceException
from selenium.common.exceptions import TimeoutException
from selenium.common.exceptions import UnexpectedTagNameException
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from selenium.webdriver.common.by import By
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import Select
from selenium.webdriver.support.ui import WebDriverWait
from webdriver_manager.chrome import ChromeDriverManager

from pjud_scraper.lib.config import Config
from pjud_scraper.lib.errors import NavigationTimeout
from pjud_scraper.lib.errors import QueryValueError
from pjud_scraper.lib.errors import SessionLaunchFailure
from pjud_scraper.lib.errors import UnexpectedPageLayout
from pjud_scraper.lib.logging_config import get_logger

logger = get_logger()


@dataclass(frozen=True)
class Cell:
    """Text and document link of one table cell."""

    text: str
    link: str = ""


def _match_option(select_element, value: str):
    """Return the <option> whose visible text or value equals `value`, else False."""
    wanted = value.strip()
    for option in Select(select_element).options:
        label = (option.text or "").strip()
        option_value = (option.get_attribute("value") or "").strip()
        if wanted in (label, option_value):
            return option
    return False


class _NavigationSettled:
    """Wait condition for the page change caused by a click.

    `before` holds the `wait_selector` element and its innerHTML as displayed
    before the click, or None when it was not displayed then.
    """

    def __init__(self, old_root, wait_selector: Optional[str], before):
        self.old_root = old_root
        self.wait_selector = wait_selector
        self.before = before

    def __call__(self, driver) -> bool:
        if EC.staleness_of(self.old_root)(driver):
            return True
        if not self.wait_selector:
            return False
        found = driver.find_elements(By.CSS_SELECTOR, self.wait_selector)
        if not found or not found[0].is_displayed():
            return False
        if self.before is None:
            return True
        old_target, old_markup = self.before
        target = found[0]
        return target != old_target or target.get_attribute("innerHTML") != old_markup


class BrowserSession:
    """One Chrome session. Not shared between scrapes or threads."""

    def __init__(
        self,
        headless: bool = True,
        stealth: bool = True,
        proxy: Optional[str] = None,
        element_timeout: float = 15,
        navigation_timeout: float = 30,
        page_load_timeout: float = 30,
        diagnostics_dir: Optional[str] = None,
    ):
        self.headless = headless
        self.stealth = stealth
        self.proxy = proxy
        self.element_timeout = element_timeout
        self.navigation_timeout = navigation_timeout
        self.page_load_timeout = page_load_timeout
        self.diagnostics_dir = diagnostics_dir
        self._driver: Optional[webdriver.Chrome] = None
        self._closed = False

    @classmethod
    def from_config(cls, proxy: Optional[str] = None, headless: Optional[bool] = None) -> "BrowserSession":
        return cls(
            headless=Config.get_headless() if headless is None else headless,
            stealth=Config.get_stealth(),
            proxy=proxy,
            element_timeout=Config.get_element_timeout_seconds(),
            navigation_timeout=Config.get_navigation_timeout_seconds(),
            page_load_timeout=Config.get_page_load_timeout_seconds(),
            diagnostics_dir=Config.get_diagnostics_dir() if Config.get_save_failure_html() else None,
        )

    def _build_options(self) -> Options:
        options = Options()
        if self.headless:
            options.add_argument("--headless=new")
        options.add_argument("--no-sandbox")
        options.add_argument("--disable-setuid-sandbox")
        options.add_argument("--disable-dev-shm-usage")
        options.add_argument("--disable-gpu")
        options.add_argument("--window-size=1920,1080")
        if self.stealth:
            options.add_argument("--disable-blink-features=AutomationControlled")
            options.add_experimental_option("excludeSwitches", ["enable-automation"])
            options.add_experimental_option("useAutomationExtension", False)
        if self.proxy:
            options.add_argument(f"--proxy-server={self.proxy}")
        # Return from driver.get after DOMContentLoaded; readiness is awaited per step
        options.page_load_strategy = "eager"
        return options

    def _setup_driver(self) -> webdriver.Chrome:
        service = Service(ChromeDriverManager().install())
        driver = webdriver.Chrome(service=service, options=self._build_options())
        try:
            driver.set_page_load_timeout(self.page_load_timeout)
        except Exception:
            # Chrome is already running and not yet owned by the session
            driver.quit()
            raise
        return driver

    @property
    def driver(self) -> webdriver.Chrome:
        if self._driver is None:
            raise RuntimeError("Browser session is not open")
        return self._driver

    def open(self) -> None:
        if self._driver is not None:
            return
        try:
            self._driver = self._setup_driver()
        except Exception as exc:
            raise SessionLaunchFailure("launch browser", f"could not start Chrome: {exc}", exc) from exc
        logger.info(
            f"Chrome WebDriver initialized (headless={self.headless}, stealth={self.stealth}, proxy={self.proxy or 'none'})"
        )

    def close(self) -> None:
        """Quit the driver. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        if self._driver is None:
            return
        try:
            self._driver.quit()
            logger.info("WebDriver closed")
        except WebDriverException as exc:
            logger.warning(f"WebDriver quit failed: {exc}")
        finally:
            self._driver = None

    # -- waiting -----------------------------------------------------------

    def wait_for_selector(self, selector: str, timeout: Optional[float] = None):
        """Block until `selector` is present and return the element."""
        timeout = self.element_timeout if timeout is None else timeout
        try:
            return WebDriverWait(self.driver, timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, selector))
            )
        except TimeoutException as exc:
            raise NavigationTimeout(
                f"wait for {selector}", f"element did not appear within {timeout}s", exc
            ) from exc

    def exists(self, selector: str, timeout: float = 0) -> bool:
        if timeout <= 0:
            return bool(self.driver.find_elements(By.CSS_SELECTOR, selector))
        try:
            WebDriverWait(self.driver, timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, selector))
            )
            return True
        except TimeoutException:
            return False

    def _wait_document_ready(self, timeout: float) -> None:
        WebDriverWait(self.driver, timeout).until(
            lambda d: d.execute_script("return document.readyState") == "complete"
        )

    # -- actions -----------------------------------------------------------

    def navigate(self, url: str, wait_selector: Optional[str] = None) -> None:
        logger.info(f"[UI_ACTION] Loading page: {url}")
        try:
            self.driver.get(url)
        except TimeoutException as exc:
            raise NavigationTimeout(
                f"load {url}", f"page did not load within {self.page_load_timeout}s", exc
            ) from exc
        if wait_selector:
            self.wait_for_selector(wait_selector, timeout=self.navigation_timeout)

    def select(self, selector: str, value: str) -> None:
        """Choose the option whose visible text or value equals `value`.

        Dependent selects are filled asynchronously by the portal, so the
        option is awaited. A value that never shows up is the caller's error.
        """
        self.wait_for_selector(selector)
        logger.info(f"[UI_ACTION] Selecting '{value}' in {selector}")
        try:
            option = WebDriverWait(
                self.driver,
                self.element_timeout,
                ignored_exceptions=(NoSuchElementException, StaleElementReferenceException),
            ).until(lambda d: _match_option(d.find_element(By.CSS_SELECTOR, selector), value))
        except TimeoutException as exc:
            raise QueryValueError(
                f"select {selector}", f"'{value}' is not one of the portal's options", exc
            ) from exc
        except UnexpectedTagNameException as exc:
            raise UnexpectedPageLayout(f"select {selector}", "control is not a <select>", exc) from exc

        option_value = option.get_attribute("value")
        Select(self.driver.find_element(By.CSS_SELECTOR, selector)).select_by_value(option_value)

    def type(self, selector: str, text: str) -> None:
        element = self.wait_for_selector(selector)
        logger.info(f"[UI_ACTION] Typing '{text}' into {selector}")
        try:
            element.clear()
        except WebDriverException:
            logger.debug(f"[UI_ACTION] Failed to clear {selector}, continuing")
        try:
            element.send_keys(text)
            return
        except WebDriverException:
            logger.info(f"[UI_ACTION] send_keys failed, trying JavaScript fallback ({selector})")
        self.driver.execute_script(
            "arguments[0].value = arguments[1];"
            " arguments[0].dispatchEvent(new Event('input'));"
            " arguments[0].dispatchEvent(new Event('change'));",
            element,
            text,
        )

    def click(self, selector: str) -> None:
        try:
            element = WebDriverWait(self.driver, self.element_timeout).until(
                EC.element_to_be_clickable((By.CSS_SELECTOR, selector))
            )
        except TimeoutException as exc:
            raise NavigationTimeout(
                f"click {selector}", f"element not clickable within {self.element_timeout}s", exc
            ) from exc
        try:
            element.click()
            logger.info(f"[UI_ACTION] Clicked {selector} using native click")
        except WebDriverException:
            logger.info(f"[UI_ACTION] Native click failed, trying JavaScript click ({selector})")
            self.driver.execute_script("arguments[0].click();", element)

    def _snapshot(self, selector: Optional[str]):
        """The displayed element for `selector` and its markup, or None."""
        if not selector:
            return None
        found = self.driver.find_elements(By.CSS_SELECTOR, selector)
        if not found or not found[0].is_displayed():
            return None
        return found[0], found[0].get_attribute("innerHTML")

    def click_and_wait(self, selector: str, wait_selector: Optional[str] = None) -> None:
        """Click and block until the navigation it triggers has settled.

        The old document and the current `wait_selector` content are captured
        before clicking, so a state that already held before the click never
        counts as the click's navigation. Settled means the old document went
        stale or `wait_selector` is displayed with new content, and then the
        new document is ready.
        """
        old_root = self.driver.find_element(By.TAG_NAME, "html")
        before = self._snapshot(wait_selector)
        self.click(selector)

        try:
            WebDriverWait(
                self.driver,
                self.navigation_timeout,
                ignored_exceptions=(StaleElementReferenceException,),
            ).until(_NavigationSettled(old_root, wait_selector, before))
            self._wait_document_ready(self.navigation_timeout)
        except TimeoutException as exc:
            raise NavigationTimeout(
                f"navigate after clicking {selector}",
                f"navigation did not settle within {self.navigation_timeout}s",
                exc,
            ) from exc

    # -- reading -----------------------------------------------------------

    def _cell_link(self, cell) -> str:
        """Document URL of a cell: an anchor href, or a form posting the document token."""
        for anchor in cell.find_elements(By.TAG_NAME, "a"):
            href = (anchor.get_attribute("href") or "").strip()
            if href and not href.startswith("javascript:") and not href.endswith("#"):
                return href
        for form in cell.find_elements(By.TAG_NAME, "form"):
            action = (form.get_attribute("action") or "").strip()
            if not action:
                continue
            params = [
                (inp.get_attribute("name"), inp.get_attribute("value") or "")
                for inp in form.find_elements(By.TAG_NAME, "input")
                if inp.get_attribute("name")
            ]
            url = urljoin(self.driver.current_url, action)
            return f"{url}?{urlencode(params)}" if params else url
        return ""

    def read_rows(self, row_selector: str) -> list[list[Cell]]:
        """Read every row matching `row_selector` into lists of cells, in rendered order."""
        rows = []
        for row in self.driver.find_elements(By.CSS_SELECTOR, row_selector):
            cells = []
            for td in row.find_elements(By.TAG_NAME, "td"):
                text = td.get_attribute("textContent") or ""
                cells.append(Cell(text=text, link=self._cell_link(td)))
            rows.append(cells)
        return rows

    def read_texts(self, selector: str) -> list[str]:
        return [
            el.get_attribute("textContent") or ""
            for el in self.driver.find_elements(By.CSS_SELECTOR, selector)
        ]

    def save_diagnostics(self, label: str) -> Optional[Path]:
        """Write page HTML and a screenshot for a failed scrape, if enabled."""
        if not self.diagnostics_dir or self._driver is None:
            return None
        out_dir = Path(self.diagnostics_dir)
        ts = datetime.now().strftime("%Y%m%d_%H%M%S")
        safe_label = "".join(c if c.isalnum() or c in "-_" else "_" for c in label)
        page_path = out_dir / f"failure_{safe_label}_{ts}.html"
        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            page_path.write_text(self._driver.page_source, encoding="utf-8")
            self._driver.save_screenshot(str(out_dir / f"failure_{safe_label}_{ts}.png"))
        except (OSError, WebDriverException) as exc:
            logger.warning(f"Failed to save diagnostics: {exc}")
            return None
        logger.info(f"Saved diagnostics to {page_path}")
        return page_path
