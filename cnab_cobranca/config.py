import configparser

from pydantic import ValidationError

from .exceptions import CnabConfigError
from .models import CnabConfig


CAMPOS_OBRIGATORIOS = ("banco", "agencia", "conta", "conta_digito", "cedente", "documento")


def _parse_secao(nome: str, secao: configparser.SectionProxy) -> CnabConfig:
    faltando = [c for c in CAMPOS_OBRIGATORIOS if not secao.get(c)]
    if faltando:
        raise CnabConfigError(
            f"Campos obrigatorios faltando na secao [{nome}]: {', '.join(faltando)}"
        )

    try:
        return CnabConfig(
            banco=secao["banco"],
            agencia=secao["agencia"],
            agencia_digito=secao.get("agencia_digito", ""),
            conta=secao["conta"],
            conta_digito=secao["conta_digito"],
            convenio=secao.get("convenio", ""),
            carteira=secao.get("carteira", ""),
            cedente=secao["cedente"],
            cedente_documento=secao["documento"],
        )
    except ValidationError as e:
        erros = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
        raise CnabConfigError(f"Secao [{nome}] invalida: {erros}") from e


def carregar_cedentes(config_file: str) -> dict[str, CnabConfig]:
    config = configparser.ConfigParser(inline_comment_prefixes=("#", ";"))
    config.read(config_file, encoding="utf-8")
    secoes = config.sections()
    if not secoes:
        raise CnabConfigError(f"Nenhum cedente configurado em {config_file}")

    cedentes = {}
    for nome in secoes:
        cedentes[nome] = _parse_secao(nome, config[nome])
    return cedentes
