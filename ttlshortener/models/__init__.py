from ttlshortener.models.mapping_model import MappingModel


__all__ = ['MappingModel']
