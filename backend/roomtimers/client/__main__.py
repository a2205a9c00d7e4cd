from roomtimers.client.cli import cli

cli(prog_name='roomtimers-client')
