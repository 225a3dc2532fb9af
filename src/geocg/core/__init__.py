from .euclidean import EuclideanGeodesic, EuclideanInnerProduct, EuclideanMetric
from .geometry import Geodesic, InnerProduct, Metric
from .sphere import PRODUCT_SPHERE, ProductSphere, SphereGeodesic
from .spd import (
    SPD,
    AffineInvariantInnerProduct,
    AffineInvariantMetric,
    SPDGeodesic,
    SPDManifold,
)

__all__: list[str] = [
    "InnerProduct",
    "Metric",
    "Geodesic",
    "EuclideanInnerProduct",
    "EuclideanMetric",
    "EuclideanGeodesic",
    "ProductSphere",
    "PRODUCT_SPHERE",
    "SphereGeodesic",
    "SPDManifold",
    "SPD",
    "AffineInvariantInnerProduct",
    "AffineInvariantMetric",
    "SPDGeodesic",
]
