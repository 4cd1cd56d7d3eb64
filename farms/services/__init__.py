from .directory import FarmDirectory, farm_directory

__all__ = ['FarmDirectory', 'farm_directory']
