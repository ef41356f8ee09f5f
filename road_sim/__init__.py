"""
Top-level package for the 2D road driving simulator.

Components:
- geometry_utils: points, segment intersection, polygon overlap
- sensors: ray fan sensor producing normalized proximity readings
- network: threshold feed-forward controller network
- car: car body, controls and damage checks
- road: lane road with side borders
- simulation: per-tick update of AI cars and dummy traffic
"""

from .geometry_utils import Intersection, Point, get_intersection, polys_intersect
from .sensors import Sensor, SensorConfig
from .network import ControlVector, DimensionMismatch, NeuralNetwork, evaluate, feed_forward
from .car import Car, CarConfig, Controls
from .road import Road
from .simulation import SimConfig, Simulation

__all__ = [
    "Intersection",
    "Point",
    "get_intersection",
    "polys_intersect",
    "Sensor",
    "SensorConfig",
    "ControlVector",
    "DimensionMismatch",
    "NeuralNetwork",
    "evaluate",
    "feed_forward",
    "Car",
    "CarConfig",
    "Controls",
    "Road",
    "SimConfig",
    "Simulation",
]
