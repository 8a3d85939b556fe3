"""
cnft_minter.bindings
~~~~~~~~~~~~~~~~~~~~

This module contains custom bindings. See:
https://www.neoteroi.dev/blacksheep/binders/
"""
import typing
from http import client

import blacksheep
import pydantic
from blacksheep.server import bindings

from cnft_minter import errors, models


class FromMintRequest(
    bindings.BoundValue[bindings.T]
):  # pylint: disable=R0903
    ...


def validation_details(
    validation_err: pydantic.ValidationError,
) -> list[dict[str, str]]:
    errors_: list[dict[str, str]] = []

    for error in validation_err.errors():
        err_idx = {}

        for err_item in error.items():
            err_idx[err_item[0]] = str(err_item[1])

        errors_.append(err_idx)

    return errors_


class MintRequestBinder(bindings.Binder):

    handle = FromMintRequest

    async def get_value(self, request: blacksheep.Request) -> typing.Any:
        body = await request.json()

        if not isinstance(body, dict):
            raise errors.BadRequest(
                "Invalid request body",
                details={"details": "Expected a JSON object"},
                status=client.UNPROCESSABLE_ENTITY,
            )

        try:
            return models.MintRequest(**body)
        except pydantic.ValidationError as validation_error:
            raise errors.BadRequest(
                "Invalid request body",
                details={"details": validation_details(validation_error)},
                status=client.UNPROCESSABLE_ENTITY,
            ) from validation_error
