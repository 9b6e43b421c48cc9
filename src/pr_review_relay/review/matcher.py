"""
Routing Rule Matcher

Matches pull request labels against the routing table.
"""

import logging
from typing import Iterable, List, Sequence

from ..models.routing import RoutingRule


logger = logging.getLogger(__name__)


class RuleMatcher:
    """
    Finds the routing rules a pull request belongs to.

    Every rule whose label the PR carries and whose destination is set
    matches, in routing-table order, so a PR with several team labels
    fans out to several destinations.
    """

    def __init__(self, rules: Sequence[RoutingRule]):
        """
        Initialize rule matcher.

        Args:
            rules: Routing table, loaded once per run
        """
        self.rules = tuple(rules)

    def match(self, labels: Iterable[str]) -> List[RoutingRule]:
        label_set = set(labels)
        return [
            rule for rule in self.rules
            if rule.has_destination and rule.label in label_set
        ]
