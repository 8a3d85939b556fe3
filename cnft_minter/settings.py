# pylint: disable=E1101,I1101
import typing

import orjson
import pydantic
import pydantic_settings
from blacksheep.settings.json import json_settings

from cnft_minter import models, services


def serialize(value: typing.Any) -> str:
    return orjson.dumps(value).decode("utf8")


json_settings.use(  # type: ignore
    loads=orjson.loads,  # type: ignore
    dumps=serialize,  # type: ignore
)


class AppSettings(pydantic_settings.BaseSettings):
    shyft_api_key: pydantic.SecretStr = pydantic.SecretStr("")
    shyft_cnft_endpoint: str = services.SHYFT_CNFT_ENDPOINT
    solana_network: str = models.MAINNET_BETA
    solana_rpc_endpoint: str | None = None
    # JSON byte array or base58 string of the signing keypair.
    cnft_mint_account: pydantic.SecretStr = pydantic.SecretStr("")
    log_endpoint: str | None = None
    timezone: str = "UTC"

    model_config = pydantic_settings.SettingsConfigDict(
        env_file=".env", extra="ignore", validate_default=True
    )

    @property
    def rpc_endpoint(self) -> str:
        return self.solana_rpc_endpoint or services.cluster_endpoint(
            self.solana_network
        )


app_settings = AppSettings()
