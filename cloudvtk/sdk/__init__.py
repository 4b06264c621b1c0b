from .run import ConvertResult, convert, convert_from_config

__all__ = ["ConvertResult", "convert", "convert_from_config"]
