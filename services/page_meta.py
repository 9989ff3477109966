"""
SEO metadata for the subscribe page.

HeadDocument is a small in-memory <head> (title, named meta tags, script
nodes) that templates render; DocumentMetadataPort is the write side the
page controller uses. A test double only needs the three set_* methods.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol

SCHEMA_NODE_ID = "subscription-schema"

PAGE_TITLE = "Upgrade Your Plan - AI LaTeX Generator"
PAGE_DESCRIPTION = (
    "Upgrade your AI LaTeX Generator subscription plan. Choose from Basic, Pro, "
    "and Power plans to unlock more document generations per month."
)

SUBSCRIPTION_SCHEMA: Dict[str, Any] = {
    "@context": "https://schema.org",
    "@type": "Product",
    "name": "AI LaTeX Generator Subscription",
    "description": "Subscribe to AI LaTeX Generator and create professional LaTeX documents with AI assistance",
    "offers": {
        "@type": "AggregateOffer",
        "lowPrice": "0.99",
        "highPrice": "19.99",
        "priceCurrency": "USD",
        "offerCount": "5",
    },
    "category": "Software Subscription",
    "image": "https://aitexgen.com/subscription.png",
    "brand": {"@type": "Brand", "name": "AI LaTeX Generator"},
}


class PageMetadataPort(Protocol):
    def set_title(self, title: str) -> None: ...

    def set_description(self, description: str) -> None: ...

    def set_structured_data(self, node_id: str, data: Dict[str, Any]) -> None: ...


@dataclass
class ScriptNode:
    id: str
    type: str
    text: str


@dataclass
class HeadDocument:
    title: str = ""
    meta: Dict[str, str] = field(default_factory=dict)
    scripts: List[ScriptNode] = field(default_factory=list)

    def find_script(self, node_id: str) -> Optional[ScriptNode]:
        for node in self.scripts:
            if node.id == node_id:
                return node
        return None

    def remove_script(self, node_id: str) -> None:
        self.scripts = [n for n in self.scripts if n.id != node_id]


def _json_for_script(data: Dict[str, Any]) -> str:
    # "</" would close the <script> element early
    return json.dumps(data).replace("</", "<\\/")


class DocumentMetadataPort:
    def __init__(self, document: HeadDocument):
        self.document = document

    def set_title(self, title: str) -> None:
        self.document.title = title

    def set_description(self, description: str) -> None:
        # Only an existing tag is updated; none is created.
        if "description" in self.document.meta:
            self.document.meta["description"] = description

    def set_structured_data(self, node_id: str, data: Dict[str, Any]) -> None:
        self.document.remove_script(node_id)
        self.document.scripts.append(
            ScriptNode(id=node_id, type="application/ld+json", text=_json_for_script(data))
        )


def inject_subscription_metadata(port: PageMetadataPort) -> None:
    port.set_title(PAGE_TITLE)
    port.set_description(PAGE_DESCRIPTION)
    port.set_structured_data(SCHEMA_NODE_ID, SUBSCRIPTION_SCHEMA)
