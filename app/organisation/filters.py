from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter


VERIFY_INVITE_CODE_PARAMETERS = [
    OpenApiParameter(
        "invite_code", OpenApiTypes.STR, OpenApiParameter.QUERY, required=True
    ),
]
