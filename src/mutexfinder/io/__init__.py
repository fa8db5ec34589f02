"""
I/O for alteration matrices, gene sets and test results.

Key Functions:
    - load_matrix / matrix_from_events: build an AlterationMatrix
    - write_matrix: write it back in the same tab-separated format
    - GeneSetLoader: gene sets from files, ranked lists or pathway catalogs
    - write_result_table / write_member_pvalues: tester outputs
    - add_pathway_names / annotate_set_members: result annotation

Examples:
    >>> from mutexfinder.io import load_matrix, GeneSetLoader
    >>> matrix = load_matrix(Path("matrix.txt"))
    >>> gene_sets = GeneSetLoader(matrix.genes).load_file(Path("sets.txt"))
"""

from mutexfinder.io.annotate import (
    REACTOME_ID_PREFIX,
    MissingGenesError,
    add_pathway_names,
    annotate_set_members,
)
from mutexfinder.io.gene_sets import GeneSet, GeneSetFormatError, GeneSetLoader, read_gene_set_file
from mutexfinder.io.loaders import MatrixFormatError, load_matrix, matrix_from_events
from mutexfinder.io.sources import (
    EventDatabase,
    EventTable,
    PathwayCatalog,
    PathwayTable,
    RankedGeneList,
    RankedGeneTable,
    parse_filter,
)
from mutexfinder.io.writers import (
    RESULTS_FILENAME,
    member_pvalue_path,
    read_member_pvalues,
    read_result_table,
    write_matrix,
    write_member_pvalues,
    write_result_table,
)

__all__ = [
    'load_matrix',
    'matrix_from_events',
    'MatrixFormatError',
    'write_matrix',
    'GeneSet',
    'GeneSetLoader',
    'GeneSetFormatError',
    'read_gene_set_file',
    'EventDatabase',
    'EventTable',
    'PathwayCatalog',
    'PathwayTable',
    'RankedGeneList',
    'RankedGeneTable',
    'parse_filter',
    'RESULTS_FILENAME',
    'member_pvalue_path',
    'read_member_pvalues',
    'read_result_table',
    'write_member_pvalues',
    'write_result_table',
    'add_pathway_names',
    'annotate_set_members',
    'MissingGenesError',
    'REACTOME_ID_PREFIX',
]
