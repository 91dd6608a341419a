import re
import unicodedata
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from .exceptions import CnabStructuralError, CnabValidationError

# Timestamps de geracao sempre em BRT
_BRT = timezone(timedelta(hours=-3))

_FORA_DO_CONJUNTO = re.compile(r"[^A-Za-z0-9 ]")
_SO_DIGITOS = re.compile(r"[0-9]+")
_CENTAVO = Decimal("0.01")


def agora_brt() -> datetime:
    """Retorna o datetime atual no fuso BRT (UTC-3), com tzinfo preservado."""
    return datetime.now(_BRT)


def apenas_digitos(valor) -> str:
    return re.sub(r"[^0-9]", "", str(valor or ""))


def somente_digitos(valor: str) -> bool:
    """True quando o texto tem apenas digitos ASCII 0-9 (e ao menos um)."""
    return _SO_DIGITOS.fullmatch(valor) is not None


def pad_left(valor, tamanho: int, preenchimento: str = "0") -> str:
    """Corta em `tamanho` e completa a esquerda. Campos numericos."""
    return str(valor if valor is not None else "")[:tamanho].rjust(tamanho, preenchimento)


def pad_right(valor, tamanho: int, preenchimento: str = " ") -> str:
    """Corta em `tamanho` e completa a direita. Campos alfanumericos."""
    return str(valor if valor is not None else "")[:tamanho].ljust(tamanho, preenchimento)


def normalizar_texto(texto) -> str:
    """Remove acentos e tudo fora de [A-Za-z0-9 ], em maiusculas.

    Os campos alfanumericos do CNAB sao ASCII de largura fixa, sem escape:
    qualquer outro caractere desalinha as colunas no banco.
    """
    decomposto = unicodedata.normalize("NFD", str(texto or ""))
    sem_acento = "".join(c for c in decomposto if not unicodedata.combining(c))
    return _FORA_DO_CONJUNTO.sub("", sem_acento).upper()


def formatar_data(data: date | None) -> str:
    """DDMMAAAA; data ausente vira '00000000'."""
    if data is None:
        return "00000000"
    return f"{data.day:02d}{data.month:02d}{data.year:04d}"


def ler_data(valor: str) -> date | None:
    """Inverso de formatar_data. '00000000' ou brancos viram None."""
    if not valor.strip() or valor == "00000000":
        return None
    if len(valor) != 8 or not somente_digitos(valor):
        raise CnabStructuralError(f"Data invalida: '{valor}' (esperado DDMMAAAA)")
    try:
        return date(int(valor[4:8]), int(valor[2:4]), int(valor[0:2]))
    except ValueError as e:
        raise CnabValidationError(f"Data invalida: '{valor}' ({e})") from e


def para_centavos(valor) -> int:
    """Converte um valor monetario em centavos, arredondando meio para cima."""
    try:
        decimal = Decimal(str(valor))
    except InvalidOperation as e:
        raise CnabValidationError(f"Valor monetario invalido: '{valor}'") from e
    if not decimal.is_finite():
        raise CnabValidationError(f"Valor monetario invalido: '{valor}'")
    return int((decimal * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def formatar_valor(valor, tamanho: int = 15) -> str:
    centavos = para_centavos(valor)
    if centavos < 0:
        raise CnabValidationError(f"Valor negativo nao permitido: {valor}")
    texto = str(centavos)
    if len(texto) > tamanho:
        raise CnabValidationError(
            f"Valor {valor} nao cabe em {tamanho} posicoes"
        )
    return texto.rjust(tamanho, "0")


def ler_valor(valor: str) -> Decimal:
    """Centavos com zeros a esquerda -> Decimal com duas casas. Brancos valem zero."""
    texto = valor.strip()
    if not texto:
        return Decimal("0.00")
    if not somente_digitos(texto):
        raise CnabStructuralError(f"Valor invalido: '{valor}' (esperado apenas digitos)")
    return Decimal(texto).scaleb(-2).quantize(_CENTAVO)


def ler_inteiro(valor: str) -> int:
    texto = valor.strip()
    if not texto:
        return 0
    if not somente_digitos(texto):
        raise CnabStructuralError(f"Campo numerico invalido: '{valor}'")
    return int(texto)
