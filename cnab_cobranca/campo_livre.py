"""Campo livre do codigo de barras, um gerador por banco.

Cada gerador recebe os dados ja no formato do banco e devolve somente digitos.
Sub-campos numericos sao completados com zeros a esquerda e cortados no
tamanho documentado (mesma convencao de pad_left do CNAB).
"""
from types import MappingProxyType

from .digitos import modulo10
from .exceptions import CnabValidationError
from .formatacao import apenas_digitos, pad_left
from .models import BankCode, CnabConfig


def _num(valor, tamanho: int) -> str:
    return pad_left(apenas_digitos(valor), tamanho)


def gerar_campo_livre_bb(convenio: str, nosso_numero: str, agencia: str, conta: str, carteira: str) -> str:
    """Banco do Brasil: layout depende do tamanho do convenio (6 ou 7 digitos)."""
    convenio = apenas_digitos(convenio)
    if len(convenio) == 6:
        return (
            convenio
            + _num(nosso_numero, 5)
            + _num(agencia, 4)
            + _num(conta, 8)
            + _num(carteira, 2)
        )
    if len(convenio) == 7:
        return "000000" + convenio + _num(nosso_numero, 10) + _num(carteira, 2)
    raise CnabValidationError(
        f"Convenio deve ter 6 ou 7 digitos para Banco do Brasil (recebeu '{convenio}')"
    )


def gerar_campo_livre_bradesco(agencia: str, carteira: str, nosso_numero: str, conta: str) -> str:
    return _num(agencia, 4) + _num(carteira, 2) + _num(nosso_numero, 11) + _num(conta, 7) + "0"


def gerar_campo_livre_itau(carteira: str, nosso_numero: str, agencia: str, conta: str) -> str:
    carteira = _num(carteira, 3)
    nosso_numero = _num(nosso_numero, 8)
    agencia = _num(agencia, 4)
    conta = _num(conta, 5)
    dac_nosso_numero = modulo10(carteira + nosso_numero)
    dac_agencia_conta = modulo10(agencia + conta)
    return carteira + nosso_numero + dac_nosso_numero + agencia + conta + dac_agencia_conta + "000"


def gerar_campo_livre_santander(codigo_cedente: str, nosso_numero: str, ios: str = "0") -> str:
    return "9" + _num(codigo_cedente, 7) + _num(nosso_numero, 13) + "0" + _num(ios or "0", 3) + "0"


def gerar_campo_livre_caixa(codigo_cedente: str, nosso_numero: str, registrada: bool = False) -> str:
    """Caixa, carteira sem registro."""
    if registrada:
        raise CnabValidationError(
            "Campo livre da Caixa para carteira registrada nao e suportado"
        )
    return _num(codigo_cedente, 6) + _num(nosso_numero, 17) + "00"


def gerar_campo_livre_sicoob(carteira: str, codigo_cedente: str, nosso_numero: str, agencia: str, conta: str) -> str:
    # '1' final e a modalidade fixa
    return (
        _num(carteira, 2)
        + _num(codigo_cedente, 5)
        + _num(nosso_numero, 11)
        + _num(agencia, 3)
        + _num(conta, 5)
        + "1"
    )


_GERADORES = MappingProxyType({
    BankCode.BANCO_DO_BRASIL: lambda c, nn: gerar_campo_livre_bb(c.convenio, nn, c.agencia, c.conta, c.carteira),
    BankCode.SANTANDER: lambda c, nn: gerar_campo_livre_santander(c.convenio, nn),
    BankCode.CAIXA: lambda c, nn: gerar_campo_livre_caixa(c.convenio, nn),
    BankCode.BRADESCO: lambda c, nn: gerar_campo_livre_bradesco(c.agencia, c.carteira, nn, c.conta),
    BankCode.ITAU: lambda c, nn: gerar_campo_livre_itau(c.carteira, nn, c.agencia, c.conta),
    BankCode.SICOOB: lambda c, nn: gerar_campo_livre_sicoob(c.carteira, c.convenio, nn, c.agencia, c.conta),
})


def gerar_campo_livre(config: CnabConfig, nosso_numero: str) -> str:
    """Escolhe o gerador pelo banco da configuracao do cedente."""
    gerador = _GERADORES.get(config.banco)
    if gerador is None:
        raise CnabValidationError(f"Banco {config.banco.value} sem campo livre implementado")
    return gerador(config, nosso_numero)
