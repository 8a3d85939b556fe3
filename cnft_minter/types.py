import typing

JsonDict = dict[str, typing.Any]
Headers = dict[str, str]
HttpResponse = tuple[int, bytes]
Secret = str | bytes | list[int]
