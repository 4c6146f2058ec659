"""Keyword router mapping a Vietnamese business question to an :class:`Intent`.

This is a coarse router, not an NLU model: the question is lower-cased and
checked against ``INTENT_RULES`` in declaration order. The first rule whose
keyword groups are all present wins, so earlier rules take precedence on
ambiguous questions ("top khách nợ" is ``top_debtors``, not ``top_customers``).
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass

import structlog

from app.backend.src.schemas.assistant import Intent

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True)
class IntentRule:
    """Matches when every keyword group has at least one substring hit."""

    intent: Intent
    all_of: tuple[tuple[str, ...], ...]

    def matches(self, normalized_query: str) -> bool:
        return all(
            any(keyword in normalized_query for keyword in group)
            for group in self.all_of
        )


INTENT_RULES: tuple[IntentRule, ...] = (
    # Debts
    IntentRule(Intent.TOP_DEBTORS, (("nợ",), ("nhiều nhất", "top"))),
    IntentRule(Intent.OVERDUE_DEBTS, (("quá hạn", "qua han"),)),
    IntentRule(Intent.TOTAL_RECEIVABLES, (("phải thu", "công nợ"), ("tổng",))),
    IntentRule(Intent.TOTAL_PAYABLES, (("phải trả",), ("tổng",))),
    IntentRule(Intent.CUSTOMER_DEBT, (("nợ",), ("ông", "bà", "khách"))),
    # Sales
    IntentRule(Intent.MONTHLY_SALES, (("bán",), ("tháng",))),
    IntentRule(Intent.YEARLY_SALES, (("doanh thu",), ("năm",))),
    IntentRule(Intent.SALES_COMPARISON, (("so sánh",), ("doanh thu",))),
    IntentRule(Intent.TOP_CUSTOMERS, (("mua nhiều", "top"), ("khách",))),
    # Inventory
    IntentRule(Intent.STOCK_STATUS, (("kho", "tồn"),)),
    IntentRule(Intent.MONTHLY_PURCHASES, (("nhập",), ("tháng",))),
    # Customers
    IntentRule(Intent.CUSTOMER_INFO, (("thông tin",), ("khách",))),
    IntentRule(Intent.INACTIVE_CUSTOMERS, (("lâu",), ("mua",))),
    IntentRule(Intent.NEW_CUSTOMERS, (("khách",), ("mới",))),
)


def classify(query: str) -> Intent:
    """Return the first matching intent for ``query``, or ``Intent.GENERAL``."""

    if not isinstance(query, str):
        return Intent.GENERAL

    # Decomposed input (combining diacritics) must match the precomposed keywords.
    normalized = unicodedata.normalize("NFC", query).lower()
    if not normalized.strip():
        return Intent.GENERAL

    for rule in INTENT_RULES:
        if rule.matches(normalized):
            LOGGER.debug("assistant_intent_matched", intent=rule.intent.value)
            return rule.intent
    return Intent.GENERAL


__all__ = ["INTENT_RULES", "IntentRule", "classify"]
