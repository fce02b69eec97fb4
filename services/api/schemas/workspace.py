"""
Pydantic schemas for workspaces (class studios).
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Department = Literal["Architecture", "Interior Design", "Industrial Design"]
StudyYear = Literal["Year 1", "Year 2", "Year 3", "Year 4", "Masters"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NetworkMetadata(_CamelModel):
    """Required to publish a workspace to the discovery network."""
    department: Department
    year: StudyYear


class WorkspaceCreate(_CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    instructor: Optional[str] = Field(None, max_length=200)
    semester: Optional[str] = Field(None, max_length=50)
    creator_name: Optional[str] = Field(None, max_length=200)


class WorkspaceJoin(_CamelModel):
    invite_code: str = Field(..., min_length=1, max_length=20)
    name: Optional[str] = Field(None, max_length=200)


class WorkspacePublish(_CamelModel):
    is_public: bool = True
    network_metadata: Optional[NetworkMetadata] = None
    instructor: Optional[str] = Field(None, max_length=200)


class WorkspaceMemberOut(_CamelModel):
    user_id: str
    name: Optional[str] = None
    role: Literal["instructor", "student"] = "student"
    joined_at: Optional[str] = None


class WorkspaceOut(_CamelModel):
    id: str
    name: str
    slug: str
    type: str = "class"
    created_by: Optional[str] = None
    studio_id: str
    members: List[WorkspaceMemberOut] = Field(default_factory=list)
    invite_code: str
    is_public: bool = False
    published_at: Optional[str] = None
    instructor: Optional[str] = None
    semester: Optional[str] = None
    network_metadata: Optional[NetworkMetadata] = None
    created_at: Optional[str] = None
