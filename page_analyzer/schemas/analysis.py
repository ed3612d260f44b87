"""
Schemas for page analysis submission, status, and result payloads.

Field names follow the public JSON contract (camelCase keys for job
envelopes, ``class`` for icon class lists).
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class AnalysisRequest(BaseModel):
    url: str | None = None


class AnalysisJobAcceptedResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    status: str
    status_url: str = Field(..., alias="statusUrl")


class LinkItem(BaseModel):
    href: str
    text: str


class LinksSection(BaseModel):
    count: int = Field(..., ge=0)
    items: list[LinkItem] = Field(default_factory=list)


class ImageIcon(BaseModel):
    type: Literal["image"]
    src: str
    alt: str


class SvgIcon(BaseModel):
    type: Literal["svg"]
    content: str


class ClassIcon(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["icon"]
    class_name: str = Field(..., alias="class")


IconItem = Annotated[Union[ImageIcon, SvgIcon, ClassIcon], Field(discriminator="type")]


class IconsSection(BaseModel):
    count: int = Field(..., ge=0)
    items: list[IconItem] = Field(default_factory=list)


class ButtonLocator(BaseModel):
    text: str
    css: str
    xpath: str


class InputLocator(BaseModel):
    type: str
    css: str
    xpath: str


class NavigationLocator(BaseModel):
    css: str
    xpath: str


class LocatorsSection(BaseModel):
    buttons: list[ButtonLocator] = Field(default_factory=list)
    inputs: list[InputLocator] = Field(default_factory=list)
    navigation: list[NavigationLocator] = Field(default_factory=list)


class AnalysisResult(BaseModel):
    url: str
    links: LinksSection
    icons: IconsSection
    locators: LocatorsSection


class AnalysisJobStatusResponse(BaseModel):
    status: str
    result: AnalysisResult | None = None
    error: str | None = None


class AnalysisJobSummary(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    job_id: str = Field(..., alias="jobId")
    url: str
    status: str
    created_at: datetime = Field(..., alias="createdAt")
    completed_at: datetime | None = Field(default=None, alias="completedAt")


class AnalysisJobListResponse(BaseModel):
    jobs: list[AnalysisJobSummary] = Field(default_factory=list)
