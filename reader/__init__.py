from reader.reader import MIPInstance

__all__ = ["MIPInstance"]
