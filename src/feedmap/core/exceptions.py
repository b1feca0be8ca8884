class MappingError(ValueError):
    pass


class PathSyntaxError(ValueError):
    pass
