"""
ENCRYPTED BUILDING GAME

Players claim a one-time gold grant and spend it on buildings.
Each account keeps its gold twice, and both copies move together:
  - clear_balance      plaintext mirror, used for sufficiency checks
  - encrypted_balance  euint64 handle in the engine, same quantity

Every constructed building is stored as a euint32 handle; only the owner
(and this contract) may decrypt it.
"""

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

ZERO_HANDLE = "0x" + "0" * 64

BALANCE_BITS = 64
BUILDING_BITS = 32

DEFAULT_BUILDINGS = {
    1: {'name': 'Base', 'cost': 100},
    2: {'name': 'Barracks', 'cost': 10},
    3: {'name': 'Farm', 'cost': 10}
}

def default_account():
    return {
        'claimed': False,
        'clear_balance': 0,
        'encrypted_balance': ZERO_HANDLE,
        'buildings': [],
        'updates': 0
    }

def fhe_engine():
    return importlib.import_module(metadata['engine'])

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# address -> {'claimed', 'clear_balance', 'encrypted_balance', 'buildings', 'updates'}
accounts = Hash()

# building_type -> {'type': int, 'name': str, 'cost': int}
catalog = Hash()

# contract metadata / config
metadata = Hash()

# counter for events
next_tx_id = Variable()

# Events
GoldClaimedEvent = LogEvent('GoldClaimed', {
    'player': {'type': str, 'idx': True},
    'amount': {'type': int},
    'encrypted_balance': {'type': str},
    'tx_id': {'type': int, 'idx': True}
})

BuildingConstructedEvent = LogEvent('BuildingConstructed', {
    'player': {'type': str, 'idx': True},
    'cost': {'type': int},
    'building_handle': {'type': str},
    'index': {'type': int},
    'tx_id': {'type': int, 'idx': True}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed(engine: str = 'con_fhe_engine', starter_grant: int = 500, buildings: dict = None):
    assert 0 < starter_grant < 2 ** BALANCE_BITS, 'Bad starter grant'

    metadata['name'] = "Encrypted Building Game"
    metadata['engine'] = engine
    metadata['starter_grant'] = starter_grant

    if buildings is None:
        buildings = DEFAULT_BUILDINGS

    # Accepts {type: {'name', 'cost'}} or the short form {type: cost}
    for key, entry in buildings.items():
        building_type = int(key)
        if isinstance(entry, dict):
            name = entry.get('name', 'Building ' + str(building_type))
            cost = entry['cost']
        else:
            name = 'Building ' + str(building_type)
            cost = entry
        assert 0 < building_type < 2 ** BUILDING_BITS, 'Bad building type'
        assert isinstance(cost, int) and not isinstance(cost, bool) and cost > 0, 'Bad building cost'
        catalog[building_type] = {'type': building_type, 'name': name, 'cost': cost}

    next_tx_id.set(1)

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

@export
def get_metadata():
    return {
        'name': metadata['name'],
        'engine': metadata['engine'],
        'starter_grant': metadata['starter_grant']
    }

@export
def get_catalog():
    return catalog.all()

@export
def get_building_cost(building_type: int):
    entry = catalog[building_type]
    if entry is None:
        return None
    return entry['cost']

@export
def get_account(address: str):
    data = accounts[address]
    exists = data is not None
    if not exists:
        data = default_account()
    return {
        'exists': exists,
        'claimed': data['claimed'],
        'clear_balance': data['clear_balance'],
        'encrypted_balance': data['encrypted_balance'],
        'buildings': data['buildings'],
        'updates': data['updates']
    }

@export
def get_gold_balance(address: str):
    return load_account(address)['clear_balance']

@export
def get_encrypted_gold(address: str):
    return load_account(address)['encrypted_balance']

@export
def get_buildings(address: str):
    return load_account(address)['buildings']

@export
def has_claimed_gold(address: str):
    return load_account(address)['claimed']

# -----------------------------------------------------------------------------
# Core: claim / build
# -----------------------------------------------------------------------------

def load_account(address: str):
    data = accounts[address]
    if data is None:
        return default_account()
    return data

def commit_account(address: str, current: dict, claimed: bool, clear_balance: int,
                   encrypted_balance: str, buildings: list):
    # Single write: every field of the record lands together or not at all.
    accounts[address] = {
        'claimed': claimed,
        'clear_balance': clear_balance,
        'encrypted_balance': encrypted_balance,
        'buildings': buildings,
        'updates': current['updates'] + 1
    }

def next_tx():
    tid = next_tx_id.get()
    next_tx_id.set(tid + 1)
    return tid

def grant_owner(fhe, handle: str, player: str):
    # The engine granted this contract as minter; the owner is added before
    # the handle is stored anywhere.
    fhe.allow(handle=handle, principal=player)
    return handle

@export
def claim_gold():
    player = ctx.caller
    current = load_account(player)

    assert not current['claimed'], 'Gold already claimed'

    amount = metadata['starter_grant']
    fhe = fhe_engine()
    handle = grant_owner(fhe, fhe.encrypt(value=amount, bits=BALANCE_BITS), player)

    commit_account(player, current,
                   claimed=True,
                   clear_balance=amount,
                   encrypted_balance=handle,
                   buildings=current['buildings'])

    tx_id = next_tx()
    GoldClaimedEvent({
        'player': player,
        'amount': amount,
        'encrypted_balance': handle,
        'tx_id': tx_id
    })

    return {
        'clear_balance': amount,
        'encrypted_balance': handle,
        'tx_id': tx_id
    }

@export
def build(building_type: int):
    player = ctx.caller

    entry = catalog[building_type]
    assert entry is not None, 'Unsupported building'

    current = load_account(player)
    cost = entry['cost']
    assert current['clear_balance'] >= cost, 'Not enough gold'

    fhe = fhe_engine()
    new_balance = current['clear_balance'] - cost
    balance_handle = grant_owner(fhe, fhe.sub(handle=current['encrypted_balance'], amount=cost), player)
    building_handle = grant_owner(fhe, fhe.encrypt(value=building_type, bits=BUILDING_BITS), player)
    buildings = current['buildings'] + [building_handle]

    commit_account(player, current,
                   claimed=current['claimed'],
                   clear_balance=new_balance,
                   encrypted_balance=balance_handle,
                   buildings=buildings)

    index = len(buildings) - 1
    tx_id = next_tx()
    BuildingConstructedEvent({
        'player': player,
        'cost': cost,
        'building_handle': building_handle,
        'index': index,
        'tx_id': tx_id
    })

    return {
        'clear_balance': new_balance,
        'encrypted_balance': balance_handle,
        'building_handle': building_handle,
        'index': index,
        'tx_id': tx_id
    }

# -----------------------------------------------------------------------------
# Invariants / Utilities
# -----------------------------------------------------------------------------

@export
def verify_balance_mirror(address: str):
    data = load_account(address)
    clear = data['clear_balance']

    if data['encrypted_balance'] == ZERO_HANDLE:
        decrypted = 0
    else:
        decrypted = fhe_engine().decrypt(handle=data['encrypted_balance'])

    report = {
        'ok': clear == decrypted,
        'clear': clear
    }

    # Only the owner may see the plaintext behind their handle.
    if ctx.caller == address:
        report['decrypted'] = decrypted
    return report
