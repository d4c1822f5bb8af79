"""HTML helpers: visible text, JSON-LD blocks and staff cards."""

import json
import re
from typing import Any, Iterator, Optional

from bs4 import BeautifulSoup, Tag

NOISE_TAGS = ["script", "style", "noscript", "nav", "footer", "svg", "iframe"]

NAME_CLASS = re.compile(
    r"^(?:sidearm-roster-player-name|sidearm-staff-member-name|sidearm-roster-coach-name"
    r"|staff-name|coach-name|person-name|name)$"
)
TITLE_CLASS = re.compile(
    r"^(?:sidearm-roster-player-position|sidearm-staff-member-title|sidearm-roster-coach-title"
    r"|staff-title|staff-position|coach-title|person-title|title|position|role)$"
)
BIO_CLASS = re.compile(r"^(?:bio|staff-bio|coach-bio|sidearm-staff-member-bio)$")

# How far up from a name element to look for the enclosing card
MAX_CARD_DEPTH = 4


def looks_like_html(text: str) -> bool:
    return bool(re.search(r"<(?:html|body|div|table|span|p)\b", text[:5000], re.I))


def html_to_text(html: str) -> str:
    """Visible text, one block element per line."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(NOISE_TAGS):
        tag.decompose()
    text = soup.get_text(separator="\n")
    lines = [re.sub(r"[ \t\xa0]+", " ", line).strip() for line in text.splitlines()]
    return "\n".join(line for line in lines if line)


def extract_json_ld(soup: BeautifulSoup) -> list[Any]:
    """All JSON-LD blocks on the page; unparsable blocks are skipped."""
    blocks = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError):
            continue
        if isinstance(data, list):
            blocks.extend(data)
        else:
            blocks.append(data)
    return blocks


def iter_people(node: Any) -> Iterator[dict]:
    """Walk JSON-LD and yield every Person object, however deeply nested."""
    if isinstance(node, list):
        for item in node:
            yield from iter_people(item)
    elif isinstance(node, dict):
        node_type = node.get("@type", "")
        types = node_type if isinstance(node_type, list) else [node_type]
        if "Person" in types and node.get("name"):
            yield node
        for key, value in node.items():
            if key != "@type" and isinstance(value, (dict, list)):
                yield from iter_people(value)


def image_url(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, dict):
        return value.get("url") or value.get("contentUrl")
    if isinstance(value, list) and value:
        return image_url(value[0])
    return None


def _card_for(name_el: Tag) -> Optional[Tag]:
    node = name_el
    for _ in range(MAX_CARD_DEPTH):
        node = node.parent
        if node is None or not isinstance(node, Tag):
            return None
        if node.find(class_=TITLE_CLASS) is not None:
            return node
    return None


def iter_staff_cards(soup: BeautifulSoup) -> Iterator[dict]:
    """Yield name/title pairs (with photo, bio, contact) from staff card markup."""
    for name_el in soup.find_all(class_=NAME_CLASS):
        card = _card_for(name_el)
        if card is None:
            continue
        title_el = card.find(class_=TITLE_CLASS)
        if title_el is None or title_el is name_el:
            continue

        entry = {
            "name": name_el.get_text(" ", strip=True),
            "title": title_el.get_text(" ", strip=True),
        }
        img = card.find("img")
        if img is not None:
            entry["photo_url"] = img.get("data-src") or img.get("src")
        bio_el = card.find(class_=BIO_CLASS)
        if bio_el is not None:
            entry["bio"] = bio_el.get_text(" ", strip=True)[:1000]
        mail = card.find("a", href=re.compile(r"^mailto:", re.I))
        if mail is not None:
            entry["email"] = mail["href"].split(":", 1)[1].split("?")[0]
        tel = card.find("a", href=re.compile(r"^tel:", re.I))
        if tel is not None:
            entry["phone"] = tel.get_text(strip=True) or tel["href"].split(":", 1)[1]
        yield entry
