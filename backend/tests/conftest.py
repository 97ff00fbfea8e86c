import pytest

from contract_core.core.config import get_settings

UNICAMPUS_CONTRACT_TEXT = """UNICAMPUSRESIDENCE S.R.L. con sede legale in Roma
CONTRATTO DI OSPITALITÀ E ALLOGGIO

E: Il/La Sig./Sig.ra MARIO ROSSI, nato/a a NAPOLI il 15/03/2003, C.F. RSSMRA03C15F839X
residente in NAPOLI, VIA TOLEDO 45
iscritto/a presso l'Università CAMPUS Bio-Medico di Roma per l'anno accademico 2025/2026

Art. 2 - L'ospite avrà il godimento dell'alloggio sito in Via Nomentum 12/B
dal 10 ottobre 2025, al 30 giugno 2026.

Art. 3 - La retta di euro 12.360,00 sarà corrisposta in numero 3 rate:
€4944 prima rata entro il 10 ottobre 2025
€3708 seconda rata entro il 10 febbraio 2026
€3708 terza rata entro il 10/06/2026

Art. 4 - In caso di danni all'alloggio l'ospite incorre nella perdita di € 250,00 versati a titolo di deposito.
"""

NO_MATCH_TEXT = "Verbale della riunione condominiale. Nessun dato contrattuale presente."


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    # Tests mutate env vars; never leak a cached Settings instance across tests.
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def unicampus_text() -> str:
    return UNICAMPUS_CONTRACT_TEXT


@pytest.fixture
def no_match_text() -> str:
    return NO_MATCH_TEXT
