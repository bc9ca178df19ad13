import json
import logging

from nacl.exceptions import CryptoError
from substrateinterface import Keypair, KeypairType

from .errors import CredentialError
from .utils import check_file

log = logging.getLogger()

SS58_FORMAT = 42

KEY_ALGORITHMS = {
    'sr25519': KeypairType.SR25519,
    'ed25519': KeypairType.ED25519,
    'ecdsa': KeypairType.ECDSA,
}


def resolve_from_file(path, passphrase, ss58_format=SS58_FORMAT):
    """
    Restore a signer from a polkadot-js encrypted JSON keystore.
    :param path: path to the keystore file
    :param passphrase: passphrase the keystore was encrypted with
    :param ss58_format: address format of the returned keypair
    :return: Keypair. Raises CredentialError if the file is unreadable, malformed or the passphrase is wrong.
    """
    try:
        with open(check_file(path), 'r', encoding='utf-8') as f:
            json_data = json.load(f)
    except (OSError, ValueError) as e:
        raise CredentialError(f"Cannot read account file {path}: {e}") from e

    try:
        keypair = Keypair.create_from_encrypted_json(json_data, passphrase, ss58_format=ss58_format)
    except CryptoError as e:
        raise CredentialError(f"Wrong passphrase for account file {path}") from e
    except (ValueError, KeyError, TypeError, NotImplementedError) as e:
        raise CredentialError(f"Unsupported account file {path}: {e}") from e

    log.debug(f"Restored account {keypair.ss58_address} from {path}")
    return keypair


def resolve_from_mnemonic(phrase, key_algorithm='sr25519', ss58_format=SS58_FORMAT):
    """
    Derive a signer from a mnemonic phrase or a secret URI (`//Alice`, `<mnemonic>//hard/soft`).
    The derivation is deterministic: the same phrase and algorithm always give the same address.
    """
    crypto_type = KEY_ALGORITHMS.get(key_algorithm)
    if crypto_type is None:
        raise CredentialError(f"Unknown key algorithm '{key_algorithm}', expected one of {sorted(KEY_ALGORITHMS)}")
    if not isinstance(phrase, str) or not phrase.strip():
        raise CredentialError("Mnemonic phrase is empty")
    try:
        return Keypair.create_from_uri(phrase, ss58_format=ss58_format, crypto_type=crypto_type)
    except (ValueError, AttributeError) as e:
        raise CredentialError(f"Malformed mnemonic phrase: {e}") from e


def resolve_descriptor(descriptor, ss58_format=SS58_FORMAT):
    """Resolve a CLI account descriptor `{<json-file-path>: <passphrase>}`."""
    if not isinstance(descriptor, dict) or len(descriptor) != 1:
        raise CredentialError("Account descriptor must be an object with exactly one {<file>: <passphrase>} entry")
    (path, passphrase), = descriptor.items()
    return resolve_from_file(path, passphrase, ss58_format=ss58_format)
