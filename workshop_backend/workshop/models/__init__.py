"""
PATH: workshop/models/__init__.py

Workshop directory export surface (customers, vehicles, workers).
"""

from .customer import Customer
from .vehicle import Vehicle
from .worker import Worker

__all__ = [
    "Customer",
    "Vehicle",
    "Worker",
]
