"""Profile kinds that link and transition records can reference."""

from enum import Enum
from types import MappingProxyType
from typing import Mapping, Union


class ProfileKind(Enum):
    """Profile types a link record may point at."""

    PROJECT = "project"
    PRODUCT = "product"
    AMC = "amc"
    COMPLAINT = "complaint"
    INFO = "info"
    JOB = "job"
    SITE_VISIT = "site_visit"


# Built once at import; read-only for every caller
PROFILE_TYPE_REFS: Mapping[ProfileKind, str] = MappingProxyType({
    ProfileKind.PROJECT: "ProjectProfile",
    ProfileKind.PRODUCT: "ProductProfile",
    ProfileKind.AMC: "AmcProfile",
    ProfileKind.COMPLAINT: "ComplaintProfile",
    ProfileKind.INFO: "InfoProfile",
    ProfileKind.JOB: "JobProfile",
    ProfileKind.SITE_VISIT: "SiteVisitSchedule",
})


def resolve_profile_ref(kind: Union[ProfileKind, str]) -> str:
    """Get the target collection reference for a profile kind.

    Raises ValueError for kinds outside ProfileKind.
    """
    if not isinstance(kind, ProfileKind):
        try:
            kind = ProfileKind(kind)
        except ValueError:
            raise ValueError(f"Invalid profile type: {kind}")
    return PROFILE_TYPE_REFS[kind]
