"""
Pydantic schemas for request/response models
"""

from .common import *
from .auth import *
from .member import *
from .dashboard import *
from .hunt import *
from .point import *
from .quota import *
