from collections.abc import Callable

import click
import tomlkit
from pydantic import TypeAdapter

import flashswap.config
from flashswap.config import dump_config, save_config_to_file, settings
from flashswap.exceptions import FlashSwapError
from flashswap.uniswap.v2_functions import flash_fee, get_amount_in, get_amount_out, quote


@click.group()
@click.version_option(package_name="flashswap")
def cli() -> None: ...


@cli.group()
def config() -> None:
    """
    Configuration commands
    """


@config.command("show")
@click.option(
    "--json",
    "output_format",
    flag_value="json",
    type=str,
    help="Show configuration in JSON format",
)
@click.option(
    "--toml",
    "output_format",
    flag_value="toml",
    type=str,
    help="Show configuration in TOML format (default)",
    default=True,
)
def config_show(output_format: str) -> None:
    """
    Display the current configuration in JSON or TOML (default) format.
    """

    match output_format:
        case "json":
            click.echo(
                TypeAdapter(dict).dump_json(
                    dump_config(settings),
                    indent=2,
                ),
            )
        case "toml":
            click.echo(
                tomlkit.dumps(
                    dump_config(settings),
                ),
            )
        case _:
            ...


@config.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
def config_init(*, force: bool) -> None:
    """
    Write the current configuration to the configuration file.
    """

    config_file = flashswap.config.CONFIG_FILE
    if (
        config_file.exists()
        and not force
        and not click.confirm(
            f"A configuration file already exists at {config_file}. Do you want to replace it?",
            default=False,
        )
    ):
        raise click.Abort

    path = save_config_to_file(settings, config_file)
    click.echo(f"Wrote configuration to {path}")


@cli.group()
def math() -> None:
    """
    Constant product pool calculations
    """


def _run_math(func: Callable[..., int], *args: int) -> None:
    try:
        result = func(*args)
    except FlashSwapError as exc:
        raise click.ClickException(exc.message or exc.__class__.__name__) from exc
    click.echo(result)


@math.command("quote")
@click.argument("amount", type=int)
@click.argument("reserve_a", type=int)
@click.argument("reserve_b", type=int)
def math_quote(amount: int, reserve_a: int, reserve_b: int) -> None:
    """
    The equivalent amount of the other asset at the current price, without fees.
    """

    _run_math(quote, amount, reserve_a, reserve_b)


@math.command("amount-out")
@click.argument("amount_in", type=int)
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
def math_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> None:
    """
    The output received for an exact input, after the swap fee.
    """

    _run_math(get_amount_out, amount_in, reserve_in, reserve_out)


@math.command("amount-in")
@click.argument("amount_out", type=int)
@click.argument("reserve_in", type=int)
@click.argument("reserve_out", type=int)
def math_amount_in(amount_out: int, reserve_in: int, reserve_out: int) -> None:
    """
    The input required for an exact output, after the swap fee.
    """

    _run_math(get_amount_in, amount_out, reserve_in, reserve_out)


@math.command("flash-fee")
@click.argument("principal", type=int)
def math_flash_fee(principal: int) -> None:
    """
    The fee owed when repaying a flash loan in the borrowed token.
    """

    _run_math(flash_fee, principal)
