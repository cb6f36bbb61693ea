# app/services/banking_service.py
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

KNOWLEDGE_PATH = Path(__file__).parent.parent / "data" / "banking_knowledge.json"

# shown when the message matches no category
FALLBACK_LINK_COUNT = 3


class BankingService:
    def __init__(self, knowledge_path: Path = KNOWLEDGE_PATH):
        with open(knowledge_path, "r", encoding="utf-8") as f:
            knowledge = json.load(f)
        self.guides = {g["id"]: g for g in knowledge["guides"]}
        self.self_service_links = knowledge["self_service_links"]
        # evaluation order matters, see detect_banking_query
        self.query_rules = knowledge["query_rules"]

    def links_for_category(self, category: str) -> List[Dict[str, Any]]:
        return [link for link in self.self_service_links if link["category"] == category]

    def get_guide(self, guide_id: str) -> Optional[Dict[str, Any]]:
        return self.guides.get(guide_id)

    def detect_banking_query(self, message: str) -> Dict[str, Any]:
        """
        Map a customer message to a query type, a step-by-step guide and self-service links.

        Every rule is checked in order. A later matching rule replaces the type and
        guide of an earlier one, while the links of all matching rules accumulate.
        """
        lower_message = (message or "").lower()
        query_type = None
        guide = None
        links: List[Dict[str, Any]] = []

        for rule in self.query_rules:
            if any(keyword in lower_message for keyword in rule["keywords"]):
                query_type = rule["type"]
                guide = self.get_guide(rule["guide"])
                links.extend(self.links_for_category(rule["link_category"]))

        if not links:
            links = list(self.self_service_links[:FALLBACK_LINK_COUNT])

        return {"type": query_type, "guide": guide, "links": links}


banking_service = BankingService()
