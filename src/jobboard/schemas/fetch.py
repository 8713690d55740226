"""Pydantic schemas for ingestion preview/execute requests."""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, Field

StrOrList = Optional[Union[str, list[str]]]


class FetchParams(BaseModel):
    """Every search parameter the ingestion API understands.

    Multi-value filters accept a string or a list; lists are joined by the
    query builder.
    """

    limit: int = Field(100, ge=10, le=100)
    offset: int = Field(0, ge=0)

    title_filter: Optional[str] = None
    advanced_title_filter: Optional[str] = None
    location_filter: StrOrList = None
    description_filter: Optional[str] = None
    advanced_description_filter: Optional[str] = None
    organization_filter: StrOrList = None
    organization_exclusion_filter: StrOrList = None
    advanced_organization_filter: Optional[str] = None

    description_type: Optional[Literal["text", "html"]] = None
    remote: Optional[bool] = None
    source: StrOrList = None
    date_filter: Optional[str] = None

    include_ai: Optional[bool] = None
    ai_employment_type_filter: StrOrList = None
    ai_work_arrangement_filter: StrOrList = None
    ai_has_salary: Optional[bool] = None
    ai_experience_level_filter: StrOrList = None
    ai_visa_sponsorship_filter: Optional[bool] = None

    include_li: bool = True
    li_organization_slug_filter: StrOrList = None
    li_organization_slug_exclusion_filter: StrOrList = None
    li_industry_filter: StrOrList = None
    li_organization_specialties_filter: Optional[str] = None
    li_organization_description_filter: Optional[str] = None
    li_organization_employees_lte: Optional[int] = Field(None, ge=0)
    li_organization_employees_gte: Optional[int] = Field(None, ge=0)


class ExecuteRequest(FetchParams):
    saved_query_id: Optional[str] = None


class PreviewResponse(BaseModel):
    success: bool = True
    count: int
    params: dict[str, Any]
    data: list[dict[str, Any]]


class FetchResultRead(BaseModel):
    status: str
    jobs_fetched: int
    jobs_created: int
    jobs_updated: int
    orgs_created: int
    orgs_updated: int
    error_message: Optional[str] = None
    duration: int


class ExecuteResponse(BaseModel):
    success: bool = True
    params: dict[str, Any]
    result: FetchResultRead
