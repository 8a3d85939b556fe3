import blacksheep

from cnft_minter import credentials, exceptions, services, settings


async def create_minter(app: blacksheep.Application):
    app_settings = settings.app_settings
    logger = None

    if not app_settings.shyft_api_key.get_secret_value():
        raise exceptions.ConfigError("SHYFT_API_KEY is not set")
    if not app_settings.cnft_mint_account.get_secret_value().strip():
        raise exceptions.ConfigError("CNFT_MINT_ACCOUNT is not set")

    if app_settings.log_endpoint:
        logger = services.LoggerService(
            endpoint_url=app_settings.log_endpoint,
            timezone=app_settings.timezone,
        )

    minter = services.CompressedNftMinter(
        api_client=services.MintApiClient(
            api_key=app_settings.shyft_api_key.get_secret_value(),
            endpoint=app_settings.shyft_cnft_endpoint,
        ),
        signer=services.TransactionSigner(
            credentials.StaticSecretProvider(
                app_settings.cnft_mint_account.get_secret_value()
            )
        ),
        submitter=services.RpcTransactionSubmitter(app_settings.rpc_endpoint),
        logger=logger,
    )
    app.services.add_instance(minter)  # type: ignore


async def dispose_minter(app: blacksheep.Application):
    minter: services.CompressedNftMinter = app.service_provider[
        services.CompressedNftMinter
    ]

    if minter.logger is not None:
        await minter.logger.close()
