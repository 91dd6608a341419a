from .models import (
    BankCode,
    BANK_NAMES,
    CnabConfig,
    Sacado,
    BoletoData,
    BoletoBarcodeParams,
)
from .boleto import (
    calcular_fator_vencimento,
    gerar_codigo_barras,
    gerar_linha_digitavel,
    linha_digitavel_para_codigo_barras,
    validar_codigo_barras,
    validar_linha_digitavel,
    extrair_info_codigo_barras,
    gerar_boleto,
    gerar_boleto_titulo,
)
from .remessa import gerar_remessa_cobranca, validar_cnab240
from .retorno import parse_retorno_cnab240, extrair_titulos_pagos, OCORRENCIAS_COBRANCA
from .config import carregar_cedentes
from .exceptions import (
    CnabError,
    CnabStructuralError,
    CnabValidationError,
    CnabIntegrityError,
    CnabConfigError,
)

__all__ = [
    "BankCode",
    "BANK_NAMES",
    "CnabConfig",
    "Sacado",
    "BoletoData",
    "BoletoBarcodeParams",
    "calcular_fator_vencimento",
    "gerar_codigo_barras",
    "gerar_linha_digitavel",
    "linha_digitavel_para_codigo_barras",
    "validar_codigo_barras",
    "validar_linha_digitavel",
    "extrair_info_codigo_barras",
    "gerar_boleto",
    "gerar_boleto_titulo",
    "gerar_remessa_cobranca",
    "validar_cnab240",
    "parse_retorno_cnab240",
    "extrair_titulos_pagos",
    "OCORRENCIAS_COBRANCA",
    "carregar_cedentes",
    "CnabError",
    "CnabStructuralError",
    "CnabValidationError",
    "CnabIntegrityError",
    "CnabConfigError",
]
