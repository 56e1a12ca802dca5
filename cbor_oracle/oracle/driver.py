# Copyright 2025 Hathor Labs
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
The oracle driver, a pure function from input bytes to pass or violation.

For every shape of the catalog the input is decoded under the Default configuration. Shapes that can't decode the
input are skipped, the others go through the whole protocol:

1. decode again and require the same value;
2. decode under every strict configuration and require that a failure has the configuration's declared kind;
3. encode under every configuration of the shape's family, checking each configuration's structural invariants on
   the output, then decode the output back and compare it to the original value.

The first violation found ends the evaluation.
"""

from __future__ import annotations

from typing import Any, Optional

from structlog import get_logger

from cbor_oracle.conf.get_settings import get_global_settings
from cbor_oracle.conf.settings import OracleSettings
from cbor_oracle.exception import DecodeError, OracleViolationError, UnsupportedValueError
from cbor_oracle.oracle.catalog import ShapeCatalog, ShapeDescriptor, ShapeFamily
from cbor_oracle.oracle.decoding import DecodingConfigurationSet
from cbor_oracle.oracle.encoding import (
    CANONICAL_SORTED,
    CORE_DETERMINISTIC,
    DEFAULT,
    EncodingConfiguration,
    EncodingConfigurationSet,
)
from cbor_oracle.oracle.equality import EqualityPolicy
from cbor_oracle.oracle.outcome import FuzzStatus, OracleOutcome, Violation, ViolationCategory
from cbor_oracle.serialization import scan_complete
from cbor_oracle.utils.result import Err, Ok, Result, propagate_result

logger = get_logger()


class Oracle:
    """ Evaluate fuzz inputs against the catalog and the configuration sets.

    The catalog, the configuration sets and the policy are immutable, an `Oracle` can evaluate any number of inputs
    and every evaluation is independent from the previous ones.
    """

    def __init__(
        self,
        *,
        settings: Optional[OracleSettings] = None,
        catalog: Optional[ShapeCatalog] = None,
        policy: Optional[EqualityPolicy] = None,
    ) -> None:
        self.log = logger.new()
        self.settings = settings or get_global_settings()
        self.catalog = catalog or ShapeCatalog.build()
        self.policy = policy or EqualityPolicy.default()
        self.decoding = DecodingConfigurationSet.from_settings(self.settings)
        self.encoding = EncodingConfigurationSet.from_settings(self.settings)

    def check(self, data: bytes) -> OracleOutcome:
        """Run the whole protocol over one input."""
        data = bytes(data)
        interesting = False
        for descriptor in self.catalog:
            attempt = self.decoding.default.attempt(data, descriptor)
            if attempt.outcome.is_err():
                continue
            interesting = True
            result = self._check_shape(data, descriptor, attempt.outcome.unwrap())
            if result.is_err():
                violation = result.unwrap_err()
                self.log.warn('violation found', category=str(violation.category), shape=violation.shape,
                              configuration=violation.configuration)
                return OracleOutcome(FuzzStatus.INTERESTING, violation)
        return OracleOutcome(FuzzStatus.INTERESTING if interesting else FuzzStatus.UNINTERESTING)

    def run(self, data: bytes) -> int:
        """Harness entry point: return the status for the fuzzing engine, or raise the violation."""
        outcome = self.check(data)
        if outcome.violation is not None:
            raise OracleViolationError(outcome.violation)
        return int(outcome.status)

    @propagate_result
    def _check_shape(self, data: bytes, descriptor: ShapeDescriptor, value: Any) -> Result[None, Violation]:
        self._check_determinism(data, descriptor, value).unwrap_or_propagate()
        self._check_strict_modes(data, descriptor, value).unwrap_or_propagate()
        match descriptor.family:
            case ShapeFamily.TIMESTAMP:
                return self._check_timestamp(descriptor, value)
            case ShapeFamily.BIGINT:
                return self._check_bigint(descriptor, value)
            case _:
                return self._check_generic(descriptor, value)

    def _check_determinism(self, data: bytes, descriptor: ShapeDescriptor, value: Any) -> Result[None, Violation]:
        default = self.decoding.default
        again = default.attempt(data, descriptor).outcome
        if again.is_err():
            return Err(Violation(ViolationCategory.NON_DETERMINISTIC_DECODE, descriptor.name, default.name, value,
                                 detail=f'second decode failed: {again.unwrap_err()!r}', encoded=data))
        if not descriptor.equals(value, again.unwrap()):
            return Err(Violation(ViolationCategory.NON_DETERMINISTIC_DECODE, descriptor.name, default.name, value,
                                 round_tripped=again.unwrap(), encoded=data))
        return Ok(None)

    def _check_strict_modes(self, data: bytes, descriptor: ShapeDescriptor, value: Any) -> Result[None, Violation]:
        for configuration in self.decoding.strict:
            attempt = configuration.attempt(data, descriptor)
            kind = attempt.error_kind
            if kind is None or configuration.accepts(kind):
                continue
            error = attempt.outcome.unwrap_err()
            return Err(Violation(
                ViolationCategory.UNEXPECTED_ERROR_KIND,
                descriptor.name,
                configuration.name,
                value,
                detail=f'expected {configuration.expected_error}, got {kind}: {error!r}',
                encoded=data,
            ))
        return Ok(None)

    @propagate_result
    def _check_generic(self, descriptor: ShapeDescriptor, value: Any) -> Result[None, Violation]:
        outputs: dict[str, bytes] = {}
        for configuration in self.encoding.general:
            encoded = self._encode_checked(
                descriptor, configuration, value, required=configuration.name == DEFAULT
            ).unwrap_or_propagate()
            if encoded is not None:
                outputs[configuration.name] = encoded

        deterministic = self.encoding.get(CORE_DETERMINISTIC)
        if deterministic.name not in outputs:
            return Ok(None)
        encoded = outputs[deterministic.name]
        redecoded = self._redecode(descriptor, deterministic, value, encoded).unwrap_or_propagate()
        result = self.policy.compare(descriptor, value, redecoded)
        if result.exceptions_applied:
            self.log.debug('equality exceptions applied', shape=descriptor.name,
                           fields=sorted(result.exceptions_applied))
        if not result.equal:
            return Err(Violation(ViolationCategory.EQUALITY, descriptor.name, deterministic.name, value,
                                 round_tripped=redecoded, encoded=encoded))

        if self.settings.CHECK_IDEMPOTENCE:
            for name in (CORE_DETERMINISTIC, CANONICAL_SORTED):
                configuration = self.encoding.get(name)
                again = self._encode_checked(descriptor, configuration, redecoded).unwrap_or_propagate()
                if again is not None and again != outputs.get(name):
                    return Err(Violation(ViolationCategory.NOT_IDEMPOTENT, descriptor.name, name, value,
                                         round_tripped=redecoded, detail=f're-encoded as {again.hex()}',
                                         encoded=outputs.get(name)))
        return Ok(None)

    @propagate_result
    def _check_timestamp(self, descriptor: ShapeDescriptor, value: Any) -> Result[None, Violation]:
        # precision depends on the form, decoding the output back is the pass condition
        for configuration in self.encoding.timestamp_modes:
            if configuration.options.timestamp.is_textual and not self.settings.textual_year_in_range(value.year):
                self.log.debug('textual form skipped', configuration=configuration.name, year=value.year)
                continue
            encoded = self._encode_checked(descriptor, configuration, value).unwrap_or_propagate()
            if encoded is not None:
                self._redecode(descriptor, configuration, value, encoded).unwrap_or_propagate()
        return Ok(None)

    @propagate_result
    def _check_bigint(self, descriptor: ShapeDescriptor, value: Any) -> Result[None, Violation]:
        for configuration in self.encoding.bigint_modes:
            encoded = self._encode_checked(descriptor, configuration, value, required=True).unwrap_or_propagate()
            assert encoded is not None
            redecoded = self._redecode(descriptor, configuration, value, encoded).unwrap_or_propagate()
            if type(redecoded) is not int or redecoded != value:
                return Err(Violation(ViolationCategory.EQUALITY, descriptor.name, configuration.name, value,
                                     round_tripped=redecoded, encoded=encoded))
        return Ok(None)

    @propagate_result
    def _encode_checked(
        self,
        descriptor: ShapeDescriptor,
        configuration: EncodingConfiguration,
        value: Any,
        *,
        required: bool = False,
    ) -> Result[Optional[bytes], Violation]:
        """Encode and check the configuration's invariants, returns `Ok(None)` when the value is outside the domain
        of the configuration and `required` is not set.
        """
        outcome = configuration.attempt(value).outcome
        if outcome.is_err():
            error = outcome.unwrap_err()
            if isinstance(error, UnsupportedValueError) and not required:
                self.log.debug('value outside configuration domain', shape=descriptor.name,
                               configuration=configuration.name, reason=str(error))
                return Ok(None)
            return Err(Violation(ViolationCategory.ENCODE_FAILURE, descriptor.name, configuration.name, value,
                                 detail=f'{type(error).__name__}: {error}'))
        encoded = outcome.unwrap()
        self._check_invariants(descriptor, configuration, value, encoded).unwrap_or_propagate()
        return Ok(encoded)

    def _check_invariants(
        self,
        descriptor: ShapeDescriptor,
        configuration: EncodingConfiguration,
        value: Any,
        encoded: bytes,
    ) -> Result[None, Violation]:
        try:
            root = scan_complete(
                encoded,
                max_nested_levels=self.settings.MAX_NESTED_LEVELS,
                max_container_length=self.settings.MAX_CONTAINER_LENGTH,
            )
        except DecodeError as e:
            return Err(Violation(ViolationCategory.STRUCTURAL_INVARIANT, descriptor.name, configuration.name, value,
                                 detail=f'output is not a single well-formed item: {e}', encoded=encoded))
        for invariant in configuration.invariants:
            problem = invariant.check(root)
            if problem is not None:
                return Err(Violation(ViolationCategory.STRUCTURAL_INVARIANT, descriptor.name, configuration.name,
                                     value, detail=f'{invariant.name}: {problem}', encoded=encoded))
        return Ok(None)

    def _redecode(
        self,
        descriptor: ShapeDescriptor,
        configuration: EncodingConfiguration,
        value: Any,
        encoded: bytes,
    ) -> Result[Any, Violation]:
        """Decode an encoder output back into a fresh value of the same shape, under Default."""
        outcome = self.decoding.default.attempt(encoded, descriptor).outcome
        if outcome.is_err():
            return Err(Violation(ViolationCategory.ROUND_TRIP_DECODE, descriptor.name, configuration.name, value,
                                 detail=repr(outcome.unwrap_err()), encoded=encoded))
        return Ok(outcome.unwrap())
