from fitting_room.models.asset import ImageAsset
from fitting_room.models.result import GeneratedImage, ResultGroup

__all__ = ["ImageAsset", "GeneratedImage", "ResultGroup"]
