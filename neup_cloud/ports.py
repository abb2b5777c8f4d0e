from textwrap import dedent

FALLBACK_PORT_MIN = 3000
FALLBACK_PORT_MAX = 13000


def get_port_finder_script(preferred_ports) -> str:
    """Bash snippet that sets ``CHOSEN_PORT`` to the first free preferred port.

    Each preferred port is probed with a ``/dev/tcp`` connect on localhost; a
    refused connection means the port is free. When every preferred port is
    taken, random ports in ``[FALLBACK_PORT_MIN, FALLBACK_PORT_MAX)`` are tried
    until one is free. There is no reservation between the probe and the
    process binding the port.

    :param preferred_ports: ordered ports to try first
    :return: the snippet, or "" when no preferred ports are given
    """
    ports = [int(p) for p in preferred_ports or []]
    if not ports:
        return ""
    ports_str = " ".join(str(p) for p in ports)
    span = FALLBACK_PORT_MAX - FALLBACK_PORT_MIN
    return dedent(f"""
        find_port() {{
            local PORTS="$1"
            for port in $PORTS; do
                if ! (echo >/dev/tcp/127.0.0.1/$port) >/dev/null 2>&1; then
                    echo $port
                    return 0
                fi
            done
            # Fallback to random port
            while true; do
                local rand=$(( ( RANDOM % {span} ) + {FALLBACK_PORT_MIN} ))
                if ! (echo >/dev/tcp/127.0.0.1/$rand) >/dev/null 2>&1; then
                    echo $rand
                    return 0
                fi
            done
        }}
        CHOSEN_PORT=$(find_port "{ports_str}")
        echo "Selected Port: $CHOSEN_PORT"
    """).strip()


def port_env(preferred_ports) -> str:
    """``PORT=$CHOSEN_PORT `` prefix, only when a port finder was emitted."""
    return "PORT=$CHOSEN_PORT " if preferred_ports else ""
