"""Fluent builder for Fantastic Jobs search parameters.

The API takes everything as query-string values: multi-value filters are
comma-joined (locations are joined with " OR "), booleans are the strings
"true"/"false", and a handful of opt-in flags must be left out entirely
rather than sent as "false".
"""

from datetime import date, datetime
from typing import Any, Iterable, Optional, Union

MIN_LIMIT = 10
MAX_LIMIT = 100

# Multi-value filters; location_filter is the only one joined with " OR ".
LIST_FIELDS = (
    "organization_filter",
    "organization_exclusion_filter",
    "source",
    "ai_employment_type_filter",
    "ai_work_arrangement_filter",
    "ai_experience_level_filter",
    "li_organization_slug_filter",
    "li_organization_slug_exclusion_filter",
    "li_industry_filter",
)
LOCATION_SEPARATOR = " OR "

OMIT_WHEN_FALSE = frozenset(
    {"include_ai", "include_li", "ai_has_salary", "ai_visa_sponsorship_filter"}
)

StrOrList = Union[str, Iterable[str], None]


def _join(values: StrOrList, separator: str) -> Optional[str]:
    if values is None:
        return None
    if isinstance(values, str):
        values = [values]
    cleaned = [v.strip() for v in values if v and v.strip()]
    return separator.join(cleaned) if cleaned else None


def _text(value: Optional[str]) -> Optional[str]:
    if value and value.strip():
        return value.strip()
    return None


class QueryBuilder:
    """Accumulates search parameters; build() renders the final query dict."""

    def __init__(self, base_params: Optional[dict[str, Any]] = None):
        self.params: dict[str, Any] = {}
        for key, value in (base_params or {}).items():
            self.set_param(key, value)

    @classmethod
    def from_params(cls, params: dict[str, Any]) -> "QueryBuilder":
        """Build from stored/admin-submitted parameters, joining list values."""
        builder = cls(params)
        if "limit" in builder.params or "offset" in builder.params:
            builder.pagination(
                int(builder.params.get("limit", MAX_LIMIT)),
                int(builder.params.get("offset", 0)),
            )
        return builder

    # ─── Raw access ─────────────────────────────────────

    def set_param(self, key: str, value: Any) -> "QueryBuilder":
        if key == "location_filter" and not isinstance(value, (str, type(None))):
            value = _join(value, LOCATION_SEPARATOR)
        elif key in LIST_FIELDS and not isinstance(value, (str, type(None))):
            value = _join(value, ",")
        if value is not None and value != "":
            self.params[key] = value
        return self

    def get_param(self, key: str) -> Any:
        return self.params.get(key)

    def has_params(self) -> bool:
        return bool(self.params)

    def clear(self) -> "QueryBuilder":
        self.params = {}
        return self

    def to_json(self) -> dict[str, Any]:
        return dict(self.params)

    # ─── Pagination ─────────────────────────────────────

    def pagination(self, limit: int = MAX_LIMIT, offset: int = 0) -> "QueryBuilder":
        self.params["limit"] = max(MIN_LIMIT, min(limit, MAX_LIMIT))
        self.params["offset"] = max(0, offset)
        return self

    # ─── Text filters ───────────────────────────────────

    def _set_text(self, key: str, value: Optional[str]) -> "QueryBuilder":
        text = _text(value)
        if text:
            self.params[key] = text
        return self

    def title_filter(self, value: str) -> "QueryBuilder":
        return self._set_text("title_filter", value)

    def advanced_title_filter(self, value: str) -> "QueryBuilder":
        if _text(value):
            self.params.pop("title_filter", None)
        return self._set_text("advanced_title_filter", value)

    def description_filter(self, value: str) -> "QueryBuilder":
        return self._set_text("description_filter", value)

    def advanced_description_filter(self, value: str) -> "QueryBuilder":
        return self._set_text("advanced_description_filter", value)

    def advanced_organization_filter(self, value: str) -> "QueryBuilder":
        return self._set_text("advanced_organization_filter", value)

    def li_organization_specialties_filter(self, value: str) -> "QueryBuilder":
        return self._set_text("li_organization_specialties_filter", value)

    def li_organization_description_filter(self, value: str) -> "QueryBuilder":
        return self._set_text("li_organization_description_filter", value)

    # ─── Multi-value filters ────────────────────────────

    def _set_list(self, key: str, values: StrOrList, separator: str = ",") -> "QueryBuilder":
        joined = _join(values, separator)
        if joined:
            self.params[key] = joined
        return self

    def location_filter(self, locations: StrOrList) -> "QueryBuilder":
        return self._set_list("location_filter", locations, LOCATION_SEPARATOR)

    def organization_filter(self, orgs: StrOrList) -> "QueryBuilder":
        return self._set_list("organization_filter", orgs)

    def organization_exclusion_filter(self, orgs: StrOrList) -> "QueryBuilder":
        return self._set_list("organization_exclusion_filter", orgs)

    def source(self, sources: StrOrList) -> "QueryBuilder":
        return self._set_list("source", sources)

    def ai_employment_type_filter(self, types: StrOrList) -> "QueryBuilder":
        return self._set_list("ai_employment_type_filter", types)

    def ai_work_arrangement_filter(self, arrangements: StrOrList) -> "QueryBuilder":
        return self._set_list("ai_work_arrangement_filter", arrangements)

    def ai_experience_level_filter(self, levels: StrOrList) -> "QueryBuilder":
        return self._set_list("ai_experience_level_filter", levels)

    def li_organization_slug_filter(self, slugs: StrOrList) -> "QueryBuilder":
        return self._set_list("li_organization_slug_filter", slugs)

    def li_organization_slug_exclusion_filter(self, slugs: StrOrList) -> "QueryBuilder":
        return self._set_list("li_organization_slug_exclusion_filter", slugs)

    def li_industry_filter(self, industries: StrOrList) -> "QueryBuilder":
        return self._set_list("li_industry_filter", industries)

    # ─── Flags and scalars ──────────────────────────────

    def description_type(self, kind: str) -> "QueryBuilder":
        self.params["description_type"] = kind
        return self

    def remote(self, is_remote: Optional[bool]) -> "QueryBuilder":
        if is_remote is not None:
            self.params["remote"] = is_remote
        return self

    def date_filter(self, value: Union[str, date, datetime, None]) -> "QueryBuilder":
        if isinstance(value, datetime):
            value = value.date()
        if isinstance(value, date):
            value = value.isoformat()
        return self._set_text("date_filter", value)

    def include_ai(self, include: bool = True) -> "QueryBuilder":
        self.params["include_ai"] = include
        return self

    def include_linkedin(self, include: bool = True) -> "QueryBuilder":
        self.params["include_li"] = include
        return self

    def ai_has_salary(self, has_salary: bool) -> "QueryBuilder":
        self.params["ai_has_salary"] = has_salary
        return self

    def ai_visa_sponsorship_filter(self, sponsorship: bool) -> "QueryBuilder":
        self.params["ai_visa_sponsorship_filter"] = sponsorship
        return self

    def li_organization_employees_range(
        self, minimum: Optional[int] = None, maximum: Optional[int] = None
    ) -> "QueryBuilder":
        if minimum is not None and minimum >= 0:
            self.params["li_organization_employees_gte"] = minimum
        if maximum is not None and maximum >= 0:
            self.params["li_organization_employees_lte"] = maximum
        return self

    # ─── Output ─────────────────────────────────────────

    def build(self) -> dict[str, Any]:
        """Render the query parameters the API expects."""
        final: dict[str, Any] = {}
        for key, value in self.params.items():
            if value is None or value == "":
                continue
            if isinstance(value, bool):
                if not value and key in OMIT_WHEN_FALSE:
                    continue
                final[key] = "true" if value else "false"
            else:
                final[key] = value
        return final
