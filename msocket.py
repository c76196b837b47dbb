'''
msocket.py -- the byte transport between server and clients

Messages are envelopes [message, player_id, data] sent over
multiprocessing.connection; world payloads inside them are already encoded
WorldDelta bytes, so the transport never looks at terrain.
'''
import socket
import multiprocessing.connection

import delve_config


def get_network_ip():
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    s.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
    s.connect(('<broadcast>', 0))
    return s.getsockname()[0]


class Listener(multiprocessing.connection.Listener):
    def __init__(self, ip, port, authkey=None):
        if authkey is None:
            authkey = delve_config.SERVER_AUTHKEY
        multiprocessing.connection.Listener.__init__(self, address=(ip, port), authkey=authkey)

    def fileno(self):
        return self._listener._socket.fileno()


def Client(ip, port, authkey=None):
    if authkey is None:
        authkey = delve_config.SERVER_AUTHKEY
    return multiprocessing.connection.Client(address=(ip, port), authkey=authkey)
