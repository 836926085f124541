from gitmirror.models.short_link_model import ShortLinkModel
from gitmirror.models.cached_response_model import CachedResponseModel
from gitmirror.models.probe_result_model import ProbeResultModel


__all__ = [
    'ShortLinkModel',
    'CachedResponseModel',
    'ProbeResultModel',
]
