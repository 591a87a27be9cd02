from .base import CamelModel, DeleteResult
