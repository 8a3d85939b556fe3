import typing

import blacksheep

from cnft_minter import errors


class MediaTypeValidator:  # pylint: disable=R0903
    async def __call__(
        self,
        request: blacksheep.Request,
        handler: typing.Callable[[blacksheep.Request], typing.Any],
    ):

        if request.method == "POST" and not request.declares_json():
            raise errors.UnsupportedMediaType()

        response = await handler(request)

        return response
