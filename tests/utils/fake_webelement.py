"""A minimal fake WebElement/WebDriver pair backed by xml.etree.ElementTree.

This provides the subset of the Selenium API that BrowserSession uses when
reading tables and waiting on clicks: `find_elements` by tag name, `text`,
`get_attribute` (including `textContent` and `innerHTML`), `is_displayed` and
staleness through `is_enabled`.
"""
from __future__ import annotations

from typing import Dict, List, Optional
import xml.etree.ElementTree as ET

from selenium.common.exceptions import NoSuchElementException
from selenium.common.exceptions import StaleElementReferenceException


class FakeWebElement:
    def __init__(self, element: ET.Element, displayed: bool = True):
        self._el = element
        self.displayed = displayed
        self.stale = False

    def _check(self):
        if self.stale:
            raise StaleElementReferenceException("element is not attached to the page document")

    @property
    def tag_name(self) -> str:
        return self._el.tag

    @property
    def text(self) -> str:
        return "".join(self._el.itertext()).strip()

    def get_attribute(self, name: str) -> Optional[str]:
        if name == "textContent":
            return "".join(self._el.itertext())
        if name == "innerHTML":
            return (self._el.text or "") + "".join(ET.tostring(c, encoding="unicode") for c in self._el)
        return self._el.attrib.get(name)

    def get_dom_attribute(self, name: str) -> Optional[str]:
        return self._el.attrib.get(name)

    def find_elements(self, by, selector) -> List["FakeWebElement"]:
        # only tag-name lookups are needed
        return [FakeWebElement(e) for e in self._el.findall(".//" + selector)]

    def is_displayed(self) -> bool:
        self._check()
        return self.displayed

    def is_enabled(self) -> bool:
        self._check()
        return True


def elements_from(xml_text: str, tag: str) -> List[FakeWebElement]:
    """Parse `xml_text` and return every `tag` element as a FakeWebElement."""
    root = ET.fromstring(xml_text)
    return [FakeWebElement(e) for e in root.iter(tag)]


class FakeDriver:
    """Driver stand-in that answers CSS lookups from a prepared mapping."""

    def __init__(self, elements: Optional[Dict[str, List[FakeWebElement]]] = None):
        self.elements = elements or {}
        self.current_url = "https://oficinajudicialvirtual.pjud.cl/indexN.php"
        self.page_source = "<html></html>"
        self.executed = []
        self.visited = []
        self.quit_count = 0

    def find_elements(self, by, selector):
        return list(self.elements.get(selector, []))

    def find_element(self, by, selector):
        found = self.elements.get(selector)
        if not found:
            raise NoSuchElementException(f"no element for {selector}")
        return found[0]

    def get(self, url):
        self.visited.append(url)

    def execute_script(self, script, *args):
        self.executed.append((script, args))
        return "complete"

    def save_screenshot(self, path):
        return True

    def quit(self):
        self.quit_count += 1
