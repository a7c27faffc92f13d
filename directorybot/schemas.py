"""Pydantic schemas for the profile, answers and API bodies."""

from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


AppType = Literal["saas", "ecommerce", "blog", "portfolio", "webapp", "other"]


class Profile(_CamelModel):
    """The application being submitted to directory sites."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    name: str = ""
    url: str = ""
    type: AppType = "other"
    description: str = ""
    target_audience: str = ""
    main_features: List[str] = Field(default_factory=list)
    tech_stack: List[str] = Field(default_factory=list)

    email: str = ""
    company_name: str = ""
    contact_name: str = ""
    location: str = ""
    github_url: str = ""
    launch_date: str = ""

    tagline: str = ""
    category: str = ""

    linkedin_url: str = ""
    x_url: str = ""
    enable_github_actions: bool = False
    enable_linkedin_sharing: bool = False
    is_released: bool = False


class Question(_CamelModel):
    id: int = Field(ge=1)
    question: str


class AnsweredQuestion(_CamelModel):
    id: int
    question: str
    answer: str


class SiteAnalysisResult(_CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    site_url: str
    site_name: str
    questions: List[AnsweredQuestion]
    meta: Dict[str, Any]


class AnalyzeRequest(_CamelModel):
    site_url: str
    questions: List[str]
    app_info: Profile


class SiteAnswersRequest(_CamelModel):
    site_url: str
    app_info: Profile


class CustomAnswersRequest(_CamelModel):
    app_info: Profile


class CustomAnswersResponse(_CamelModel):
    app_info: Profile
    analyses: List[SiteAnalysisResult]
    timestamp: str
