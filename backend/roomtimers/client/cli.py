import logging

import click
from socketio.exceptions import ConnectionError as ChannelConnectionError

from roomtimers.client import TimerClient
from roomtimers.config import ClientConfig


def format_timers(timers):
    if not timers:
        return '(no timers)'
    lines = []
    for timer_id, timer in sorted(timers.items()):
        state = 'running' if timer['isRunning'] else 'stopped'
        note = f"  {timer['note']}" if timer['note'] else ''
        lines.append(f"{timer_id}  {timer['count']:.1f}s  {state}{note}")
    return '\n'.join(lines)


@click.group()
@click.option('--url', default=ClientConfig.AUTHORITY_URL, show_default=True, help='Authority URL.')
@click.option('-v', '--verbose', is_flag=True, help='Log connectivity and routing.')
@click.pass_context
def cli(ctx, url, verbose):
    """Shared room timers client."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    ctx.obj = {'url': url}


@cli.command('watch')
@click.argument('room_id')
@click.option('--create', is_flag=True, help='Create a timer after joining.')
@click.pass_context
def watch_command(ctx, room_id, create):
    """Join ROOM_ID and print the room's timers on every change."""
    client = TimerClient(url=ctx.obj['url'])

    def render(reason, timers):
        click.echo(f"-- {reason}")
        click.echo(format_timers(timers))

    client.subscribe(render)
    client.join_room(room_id)
    try:
        client.connect()
        if create:
            client.create_timer()
        client.session.wait()
    except KeyboardInterrupt:
        pass
    except ChannelConnectionError as exc:
        raise click.ClickException(f"cannot reach {ctx.obj['url']}: {exc}")
    finally:
        client.leave_room()
        client.close()


if __name__ == '__main__':
    cli()
