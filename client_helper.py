# ---- Chain-constant parameters (mirror contracts) ----

ZERO_HANDLE = "0x" + "0" * 64

STARTER_GRANT = 500

BUILDINGS = {
    1: {'name': 'Base', 'cost': 100, 'description': 'Foundation of your settlement with sturdy walls.'},
    2: {'name': 'Barracks', 'cost': 10, 'description': 'Train and house your troops securely.'},
    3: {'name': 'Farm', 'cost': 10, 'description': 'Feed your forces with encrypted crops.'},
}

# ---- Errors -----------------------------------------------------------------

class LedgerError(Exception):
    """Base class for rejections raised by the building game or its engine."""
    message = None


class AlreadyClaimed(LedgerError):
    message = 'Gold already claimed'


class UnsupportedBuilding(LedgerError):
    message = 'Unsupported building'


class InsufficientFunds(LedgerError):
    message = 'Not enough gold'


class Unauthorized(LedgerError):
    message = 'Unauthorized'


ERRORS_BY_MESSAGE = {
    cls.message: cls
    for cls in (AlreadyClaimed, UnsupportedBuilding, InsufficientFunds, Unauthorized)
}

def error_from_message(message):
    """Map an on-chain assertion message to its named error, or None."""
    cls = ERRORS_BY_MESSAGE.get(str(message).strip())
    if cls is None:
        return None
    return cls(cls.message)

def call_ledger(method, **kwargs):
    """
    Invoke a contract method and re-raise known rejections as named errors.
    Anything the helper does not recognise propagates unchanged.
    """
    try:
        return method(**kwargs)
    except AssertionError as exc:
        named = error_from_message(exc)
        if named is None:
            raise
        raise named from exc

# ---- Catalog ----------------------------------------------------------------

def is_zero_handle(handle) -> bool:
    """True for the never-initialised sentinel (or a missing handle)."""
    if handle is None:
        return True
    if not isinstance(handle, str):
        return False
    try:
        return int(handle, 16) == 0
    except ValueError:
        return False

def building_cost(building_type: int, catalog: dict = None):
    catalog = BUILDINGS if catalog is None else catalog
    entry = catalog.get(building_type)
    if entry is None:
        return None
    return entry['cost'] if isinstance(entry, dict) else entry

def describe_buildings(type_ids, catalog: dict = None):
    catalog = BUILDINGS if catalog is None else catalog
    names = []
    for type_id in type_ids:
        entry = catalog.get(int(type_id))
        if isinstance(entry, dict) and 'name' in entry:
            names.append(entry['name'])
        else:
            names.append(f"Unknown building #{type_id}")
    return names

# ---- High-level builders -----------------------------------------------------

def build_construct(building_type: int, clear_balance: int, catalog: dict = None):
    """
    Returns args for contract.build():
        (building_type,)
    plus the cost and the balance expected after the call. Checks run in the
    same order as on-chain: catalog membership first, then sufficiency.
    """
    if clear_balance is None or clear_balance < 0:
        raise ValueError("clear_balance must be a non-negative integer")

    cost = building_cost(building_type, catalog)
    if cost is None:
        raise UnsupportedBuilding(UnsupportedBuilding.message)
    if clear_balance < cost:
        raise InsufficientFunds(InsufficientFunds.message)

    return {
        'building_type': building_type,
        'cost': cost,
        'new_balance': clear_balance - cost
    }

def decrypt_handles(engine, handles, signer: str):
    """
    Decrypt each handle through the engine contract as `signer`.
    Returns plaintexts in the same order as `handles`.
    """
    return [call_ledger(engine.decrypt, handle=handle, signer=signer) for handle in handles]

# ---- Convenience: wallet-side state tracker (optional) ----------------------

class PlayerLedger:
    """
    Optional local mirror of one player's account: the clear balance and the
    decrypted building ids, in construction order.
    """
    def __init__(self, catalog: dict = None, starter_grant: int = STARTER_GRANT):
        self.catalog = BUILDINGS if catalog is None else catalog
        self.starter_grant = starter_grant
        self.claimed = False
        self.clear_balance = 0
        self.buildings = []

    def apply_claim(self):
        if self.claimed:
            raise AlreadyClaimed(AlreadyClaimed.message)
        self.claimed = True
        self.clear_balance = self.starter_grant
        return self.clear_balance

    def apply_build(self, building_type: int):
        plan = build_construct(building_type, self.clear_balance, self.catalog)
        self.clear_balance = plan['new_balance']
        self.buildings.append(building_type)
        return self.clear_balance

    def matches(self, account: dict) -> bool:
        """Compare against get_account() output (handles are not decrypted)."""
        return (
            account['claimed'] == self.claimed
            and account['clear_balance'] == self.clear_balance
            and len(account['buildings']) == len(self.buildings)
        )
