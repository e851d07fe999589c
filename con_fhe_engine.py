"""
CONFIDENTIAL-COMPUTATION ENGINE

Opaque ciphertext handles over fixed-width unsigned integers.
Every handle carries an ACL; decrypt is only served to granted principals:
  - minting a handle (encrypt / add / sub / ge) grants the minter
  - a granted principal may extend the grant with allow()

Values behind a handle are only ever read through decrypt().
"""

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

SUPPORTED_BITS = [1, 8, 16, 32, 64]

ZERO_HANDLE = "0x" + "0" * 64  # never-initialised sentinel

def domain_hash(*parts):
    s = "|".join(str(x) for x in parts)
    return hashlib.sha3("FHE:v1|" + s)

def wrap(value: int, bits: int):
    return value % (2 ** bits)

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# handle -> {'bits': int, 'value': int}
ciphertexts = Hash()

# (handle, principal) -> bool
acl = Hash(default_value=False)

next_handle_nonce = Variable()

AccessGrantedEvent = LogEvent('AccessGranted', {
    'handle': {'type': str, 'idx': True},
    'principal': {'type': str, 'idx': True}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed():
    next_handle_nonce.set(1)

# -----------------------------------------------------------------------------
# Internals
# -----------------------------------------------------------------------------

def mint(value: int, bits: int, owner: str):
    nonce = next_handle_nonce.get()
    next_handle_nonce.set(nonce + 1)

    handle = "0x" + domain_hash(owner, nonce, bits)
    ciphertexts[handle] = {'bits': bits, 'value': value}
    grant(handle, owner)
    return handle

def grant(handle: str, principal: str):
    if acl[handle, principal]:
        return
    acl[handle, principal] = True
    AccessGrantedEvent({'handle': handle, 'principal': principal})

def load(handle: str):
    assert acl[handle, ctx.caller], 'Unauthorized'
    sealed = ciphertexts[handle]
    assert sealed is not None, 'Unknown handle'
    return sealed

# -----------------------------------------------------------------------------
# Arithmetic
# -----------------------------------------------------------------------------

@export
def encrypt(value: int, bits: int):
    assert bits in SUPPORTED_BITS, 'Unsupported bit width'
    assert 0 <= value < 2 ** bits, 'Value out of range'
    return mint(value, bits, ctx.caller)

@export
def add(handle: str, amount: int):
    assert amount >= 0, 'Negative operand'
    sealed = load(handle)
    bits = sealed['bits']
    return mint(wrap(sealed['value'] + amount, bits), bits, ctx.caller)

@export
def sub(handle: str, amount: int):
    # Underflow wraps; callers check sufficiency before subtracting.
    assert amount >= 0, 'Negative operand'
    sealed = load(handle)
    bits = sealed['bits']
    return mint(wrap(sealed['value'] - amount, bits), bits, ctx.caller)

@export
def ge(handle: str, amount: int):
    sealed = load(handle)
    result = 1 if sealed['value'] >= amount else 0
    return mint(result, 1, ctx.caller)

# -----------------------------------------------------------------------------
# Access control
# -----------------------------------------------------------------------------

@export
def allow(handle: str, principal: str):
    assert acl[handle, ctx.caller], 'Unauthorized'
    grant(handle, principal)

@export
def is_allowed(handle: str, principal: str):
    return acl[handle, principal]

@export
def bit_width(handle: str):
    sealed = ciphertexts[handle]
    if sealed is None:
        return 0
    return sealed['bits']

@export
def decrypt(handle: str):
    return load(handle)['value']
