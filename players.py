import itertools

_ids = itertools.count()


class Player(object):
    '''
    a connected player as the server sees it: its connection, its outgoing
    message queue and its last reported position
    '''
    def __init__(self, conn):
        self.conn = conn
        self.id = next(_ids)
        self.name = 'MINER'
        self.position = (0.0, 0.0) #world coordinates, y grows upward
        self.comms_queue = []

    @property
    def y(self):
        return self.position[1]

    def __repr__(self):
        return self.name

    def __str__(self):
        return self.name


class ClientPlayer(object):
    '''
    picklable snapshot of a Player sent to clients
    '''
    def __init__(self, player):
        self.id = player.id
        self.name = player.name
        self.position = player.position

    def __repr__(self):
        return self.name

    def __str__(self):
        return self.name
