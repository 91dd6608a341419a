from datetime import date, datetime, timedelta

from .campo_livre import gerar_campo_livre
from .digitos import modulo10, modulo11
from .exceptions import CnabIntegrityError, CnabStructuralError, CnabValidationError
from .formatacao import apenas_digitos, formatar_valor, ler_valor, somente_digitos
from .models import BoletoBarcodeParams, BoletoData, CnabConfig
from .results import BoletoBarcode, InfoCodigoBarras, ValidacaoResultado

DATA_BASE_FATOR = date(1997, 10, 7)
TAMANHO_CODIGO_BARRAS = 44
TAMANHO_LINHA_DIGITAVEL = 47


def calcular_fator_vencimento(vencimento: date) -> int:
    if isinstance(vencimento, datetime):
        vencimento = vencimento.date()
    dias = (vencimento - DATA_BASE_FATOR).days
    if dias < 0:
        raise CnabValidationError(
            f"Vencimento {vencimento.isoformat()} anterior a data base do fator ({DATA_BASE_FATOR.isoformat()})"
        )
    if dias > 9999:
        # Regra de volta mantida por compatibilidade com boletos ja emitidos.
        # Nao e o rebase FEBRABAN de 22/02/2025; confirmar com o banco antes de mudar.
        return 1000 + (dias - 1000) % 9000
    return dias


def gerar_codigo_barras(params: BoletoBarcodeParams) -> str:
    campo_livre = params.campo_livre.ljust(25, "0")[:25]
    sem_dv = (
        params.bank_code.value
        + params.moeda
        + f"{params.fator_vencimento:04d}"
        + formatar_valor(params.valor, 10)
        + campo_livre
    )
    dv = modulo11(sem_dv)
    return sem_dv[:4] + dv + sem_dv[4:]


def _validar_formato_codigo(codigo: str) -> None:
    if len(codigo) != TAMANHO_CODIGO_BARRAS:
        raise CnabStructuralError(
            f"Codigo de barras deve ter 44 digitos (tem {len(codigo)})"
        )
    if not somente_digitos(codigo):
        raise CnabStructuralError("Codigo de barras deve conter apenas numeros")


def _campo_com_dac(campo: str) -> str:
    campo = campo + modulo10(campo)
    return f"{campo[:5]}.{campo[5:]}"


def gerar_linha_digitavel(codigo_barras: str) -> str:
    _validar_formato_codigo(codigo_barras)
    campo1 = _campo_com_dac(codigo_barras[0:4] + codigo_barras[19:24])
    campo2 = _campo_com_dac(codigo_barras[24:34])
    campo3 = _campo_com_dac(codigo_barras[34:44])
    campo4 = codigo_barras[4]
    campo5 = codigo_barras[5:19]
    return " ".join((campo1, campo2, campo3, campo4, campo5))


def linha_digitavel_para_codigo_barras(linha: str) -> str:
    """Reconstroi o codigo de barras de 44 digitos a partir da linha digitavel.

    Aceita a linha com ou sem pontuacao. Nao confere os DACs dos campos;
    para isso use validar_linha_digitavel.
    """
    digitos = apenas_digitos(linha)
    if len(digitos) != TAMANHO_LINHA_DIGITAVEL:
        raise CnabStructuralError(
            f"Linha digitavel deve ter 47 digitos (tem {len(digitos)})"
        )
    return (
        digitos[0:4]       # banco + moeda
        + digitos[32]      # DV geral
        + digitos[33:47]   # fator + valor
        + digitos[4:9]
        + digitos[10:20]
        + digitos[21:31]
    )


def validar_codigo_barras(codigo: str) -> ValidacaoResultado:
    erros = []
    if len(codigo) != TAMANHO_CODIGO_BARRAS:
        erros.append(f"Codigo de barras deve ter 44 digitos (tem {len(codigo)})")
        return ValidacaoResultado(valido=False, erros=erros)

    if not somente_digitos(codigo):
        erros.append("Codigo de barras deve conter apenas numeros")

    sem_dv = codigo[:4] + codigo[5:]
    if somente_digitos(sem_dv):
        esperado = modulo11(sem_dv)
        if codigo[4] != esperado:
            erros.append(
                f"Digito verificador invalido (esperado {esperado}, informado {codigo[4]})"
            )

    return ValidacaoResultado(valido=not erros, erros=erros)


def validar_linha_digitavel(linha: str) -> ValidacaoResultado:
    digitos = apenas_digitos(linha)
    if len(digitos) != TAMANHO_LINHA_DIGITAVEL:
        return ValidacaoResultado(
            valido=False,
            erros=[f"Linha digitavel deve ter 47 digitos (tem {len(digitos)})"],
        )

    erros = []
    for numero, (inicio, fim) in enumerate(((0, 9), (10, 20), (21, 31)), start=1):
        campo = digitos[inicio:fim]
        esperado = modulo10(campo)
        if digitos[fim] != esperado:
            erros.append(
                f"Campo {numero}: DAC invalido (esperado {esperado}, informado {digitos[fim]})"
            )

    erros.extend(validar_codigo_barras(linha_digitavel_para_codigo_barras(digitos)).erros)
    return ValidacaoResultado(valido=not erros, erros=erros)


def extrair_info_codigo_barras(codigo: str) -> InfoCodigoBarras:
    """Decompoe um codigo de barras. Nao valida o DV: chame validar_codigo_barras antes."""
    _validar_formato_codigo(codigo)
    fator = int(codigo[5:9])
    return InfoCodigoBarras(
        banco=codigo[0:3],
        moeda=codigo[3],
        digito_verificador=codigo[4],
        fator_vencimento=fator,
        valor=ler_valor(codigo[9:19]),
        campo_livre=codigo[19:44],
        data_vencimento=DATA_BASE_FATOR + timedelta(days=fator),
    )


def gerar_boleto(params: BoletoBarcodeParams) -> BoletoBarcode:
    codigo = gerar_codigo_barras(params)
    return BoletoBarcode(codigo_barras=codigo, linha_digitavel=gerar_linha_digitavel(codigo))


def gerar_boleto_titulo(config: CnabConfig, boleto: BoletoData) -> BoletoBarcode:
    """Codigo de barras e linha digitavel de um titulo, pelo banco do cedente."""
    params = BoletoBarcodeParams(
        bank_code=config.banco,
        fator_vencimento=calcular_fator_vencimento(boleto.data_vencimento),
        valor=boleto.valor,
        campo_livre=gerar_campo_livre(config, boleto.nosso_numero),
    )
    return gerar_boleto(params)


def converter_linha_digitavel(linha: str) -> str:
    """Linha digitavel -> codigo de barras, exigindo DACs e DV corretos."""
    validacao = validar_linha_digitavel(linha)
    if not validacao.valido:
        raise CnabIntegrityError("; ".join(validacao.erros))
    return linha_digitavel_para_codigo_barras(linha)
