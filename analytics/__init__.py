# Analytics package initialization
from .database import DatabaseManager
from .data_processor import DataProcessor
from .sample_data import generate_sample_data

__all__ = ['DatabaseManager', 'DataProcessor', 'generate_sample_data']
