from .fee_preview import FeePreviewView
from .kitchen import KitchenReadyView
from .order import OrderViewSet

__all__ = ["FeePreviewView", "KitchenReadyView", "OrderViewSet"]
