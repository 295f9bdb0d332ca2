"""Initial reference data seeded into a fresh database."""

from __future__ import annotations

INITIAL_COMPETENCIES = [
    ("c1", "Lógica de Programação"),
    ("c2", "Banco de Dados"),
    ("c3", "Desenvolvimento Web React"),
    ("c4", "Gestão de Pessoas"),
    ("c5", "Contabilidade Básica"),
    ("c6", "Excel Avançado"),
    ("c7", "Desenho Técnico AutoCAD"),
    ("c8", "Usinagem Mecânica"),
]

INITIAL_WORKLOADS = [
    ("w1", "20 Horas Semanais"),
    ("w2", "40 Horas Semanais"),
    ("w3", "Horista"),
]

INITIAL_AREAS = [
    ("a1", "Informática", "#3b82f6"),
    ("a2", "Mecânica", "#ef4444"),
    ("a3", "Administração", "#f59e0b"),
]

# (id, name, is_system)
INITIAL_ACTIVITY_CATEGORIES = [
    ("aula", "AULA", True),
    ("lab_uso", "LAB_USO", True),
    ("reuniao", "REUNIÃO", False),
    ("atendimento", "ATENDIMENTO EXTERNO", False),
    ("afastamento", "AFASTAMENTO", False),
    ("compensacao", "COMPENSAÇÃO DE HORAS", False),
]
