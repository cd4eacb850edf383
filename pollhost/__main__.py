from pollhost.cli import cli

cli()
