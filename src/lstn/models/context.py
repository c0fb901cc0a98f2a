"""Analysis context attached to every request sent to listen.dev."""

from pydantic import BaseModel, ConfigDict, Field


class VersionInfo(BaseModel):
    short: str
    long: str


class OSInfo(BaseModel):
    """Operating system details of the machine running lstn."""

    os: str = ""
    arch: str = ""
    kernel: str = ""
    kernel_version: str = ""
    hostname: str = ""

    def user_agent(self) -> str:
        """Format as ``os/arch (hostname) kernel/version``, omitting what is unknown."""
        ret = ""
        if self.os:
            ret = self.os
            if self.arch:
                ret += f"/{self.arch}"
            if self.hostname:
                ret += f" ({self.hostname})"
        if self.kernel:
            if ret:
                ret += " "
            ret += self.kernel
            if self.kernel_version:
                ret += f"/{self.kernel_version}"
        return ret


class GitIdentity(BaseModel):
    name: str = ""
    email: str = ""


class GitURL(BaseModel):
    url: str = ""


class GitRemote(BaseModel):
    fetch: GitURL = Field(default_factory=GitURL)
    push: GitURL = Field(default_factory=GitURL)


class GitContext(BaseModel):
    """Git identity and remotes of the repository being analyzed."""

    user: GitIdentity | None = None
    author: GitIdentity | None = None
    remotes: dict[str, GitRemote] = Field(default_factory=dict)


class AnalysisContext(BaseModel):
    """Provenance of a request: tool version, OS, git, package managers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    version: VersionInfo
    git: GitContext | None = None
    os: OSInfo | None = None
    package_managers: dict[str, str] | None = Field(default=None, alias="packagemanagers")
