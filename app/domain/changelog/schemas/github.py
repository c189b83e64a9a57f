from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class CommitRef(BaseModel):
    """Commit as supplied by the caller"""

    sha: str = Field(validation_alias=AliasChoices("sha", "hash"))
    message: str
    author: str
    date: datetime


class CommitFile(BaseModel):
    """File changed by a commit"""

    filename: str
    patch: str | None = None


class CommitStats(BaseModel):
    """Line totals of a commit"""

    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)


class CommitDetail(BaseModel):
    """Upstream commit detail"""

    sha: str
    message: str
    author: str
    date: datetime
    files: list[CommitFile] = Field(default_factory=list)
    stats: CommitStats = Field(default_factory=CommitStats)


class RepositoryFile(BaseModel):
    """Entry of a repository directory listing"""

    name: str
    type: str
    path: str
