#!/usr/bin/env python3
"""
DNS Tool.

Массовый резолв A-записей через набор резолверов с ограничением скорости,
failover между резолверами и фильтрацией wildcard-ответов.

Два режима:
  * поток имен со stdin (``cat domains.txt | dns-tool``);
  * перебор поддоменов по словарю (``dns-tool -d example.com -w words.txt``).
"""

import argparse
import asyncio
import logging
import sys
import time
from typing import AsyncIterator, Optional, Set, TextIO

from config import Config, ConfigError, EnumeratorConfig
from limiter import RateLimiter
from resolver import ResolutionError, ResolverPool
from sink import ResultSink
from utils import (
    aiter_lines,
    base_domain,
    format_result,
    format_time,
    load_resolvers_from_file,
    open_wordlist,
    parse_resolver_list,
    resolve_resolver_host,
    validate_domain,
)
from wildcard import WildcardDetector


class DNSEnumerator:
    """Основной класс: резолв имен и вывод результатов"""

    def __init__(self,
                 config: EnumeratorConfig,
                 pool: Optional[ResolverPool] = None,
                 stream: Optional[TextIO] = None):
        """
        Инициализация

        Args:
            config: Конфигурация запуска
            pool: Пул резолверов (по умолчанию строится из config.resolvers)
            stream: Основной поток вывода (по умолчанию stdout)

        Raises:
            ConfigError: если не удалось открыть файл вывода
        """
        self.config = config
        self.pool = pool or ResolverPool(config.resolvers, config.timeout, config.verbose)
        self.detector = WildcardDetector(self.pool, config.verbose)
        self.stream = stream

        self.output_file: Optional[TextIO] = None
        if config.output_file:
            try:
                self.output_file = open(config.output_file, 'a', encoding='utf-8')
            except OSError as e:
                raise ConfigError(f"error opening output file: {e}") from e

        # Статистика
        self.dispatched = 0
        self.found = 0
        self.filtered = 0
        self.failed = 0

        self._probed: Set[str] = set()

    def close(self) -> None:
        if self.output_file is not None:
            self.output_file.close()
            self.output_file = None

    def write_output(self, result: str) -> None:
        """Запись результата в stdout и в файл (если указан)"""
        print(result, file=self.stream or sys.stdout, flush=True)
        if self.output_file is not None:
            self.output_file.write(result + "\n")
            self.output_file.flush()

    async def detect_wildcard(self, domain: str) -> None:
        if not self.config.wildcard_check:
            return
        await self.detector.probe(domain)

    async def process_domain(self, domain: str, sink: ResultSink) -> None:
        """
        Резолв одного имени и отправка результата в sink.

        Ничего не отправляет, если имя не разрешилось или ответ совпал
        с wildcard.
        """
        try:
            ips = await self.pool.lookup(domain)
        except ResolutionError as e:
            self.failed += 1
            if self.config.verbose:
                logging.warning(f"Error resolving {domain}: {e}")
            return

        if self.config.wildcard_check and self.detector.is_wildcard_response(ips):
            self.filtered += 1
            if self.config.verbose:
                logging.info(f"Filtered wildcard response for {domain}: {ips}")
            return

        self.found += 1
        await sink.put(format_result(domain, ips))

    async def _dispatch(self,
                        names: AsyncIterator[str],
                        sink: ResultSink,
                        probe_suffix: bool) -> None:
        """
        Запуск воркера на каждое имя с ограничением скорости.

        Возвращается, когда все воркеры завершились.
        """
        limiter = RateLimiter(self.config.rate)
        semaphore = (asyncio.Semaphore(self.config.max_concurrent)
                     if self.config.max_concurrent else None)
        tasks: Set[asyncio.Task] = set()

        async def worker(name: str) -> None:
            if semaphore is None:
                await self.process_domain(name, sink)
                return
            async with semaphore:
                await self.process_domain(name, sink)

        def on_done(task: asyncio.Task) -> None:
            tasks.discard(task)
            if task.cancelled():
                return
            error = task.exception()
            # Ошибку писателя sink пробросит один раз, при закрытии
            if error is not None and not sink.failed:
                logging.error(f"Worker for {task.get_name()} failed: {error!r}")

        async for name in names:
            # Писатель упал: дальше запускать воркеры бессмысленно
            if sink.failed:
                break

            if probe_suffix and self.config.wildcard_check:
                suffix = base_domain(name)
                if suffix and suffix not in self._probed:
                    self._probed.add(suffix)
                    await self.detect_wildcard(suffix)

            await limiter.wait()
            self.dispatched += 1
            task = asyncio.create_task(worker(name), name=name)
            tasks.add(task)
            task.add_done_callback(on_done)

        await asyncio.gather(*tasks, return_exceptions=True)

    async def enumerate_from_reader(self, reader: TextIO) -> None:
        """
        Резолв имен из потока (по одному на строку).

        Args:
            reader: Поток ввода, обычно stdin
        """
        async with ResultSink(self.write_output) as sink:
            await self._dispatch(aiter_lines(reader), sink, probe_suffix=True)

    async def bruteforce(self, domain: str, wordlist: str) -> None:
        """
        Перебор поддоменов по словарю.

        Args:
            domain: Целевой домен
            wordlist: Путь к файлу словаря

        Raises:
            ConfigError: если словарь не открывается
        """
        wordlist_file = open_wordlist(wordlist)

        async def names() -> AsyncIterator[str]:
            async for label in aiter_lines(wordlist_file):
                yield f"{label}.{domain}"

        try:
            await self.detect_wildcard(domain)
            async with ResultSink(self.write_output) as sink:
                await self._dispatch(names(), sink, probe_suffix=False)
        finally:
            wordlist_file.close()

    def log_summary(self, elapsed: float) -> None:
        if not self.config.verbose:
            return
        logging.info(
            f"[*] Done in {format_time(elapsed)}: {self.dispatched} names, "
            f"{self.found} found, {self.filtered} filtered, {self.failed} failed"
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='dns-tool',
        description='Fast DNS resolution and subdomain enumeration',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -d example.com -w wordlist.txt -r resolvers.txt
  subfinder -d example.com | %(prog)s -r resolvers.txt
  cat domains.txt | %(prog)s --resolvers 8.8.8.8,1.1.1.1:53 --rate 50 -o out.txt
        """
    )

    parser.add_argument('-d', '--domain',
                        help='Domain to brute-force')

    parser.add_argument('-w', '--wordlist',
                        help='Wordlist for brute-force')

    parser.add_argument('-r', '--resolver-file',
                        help='File containing DNS resolvers (one per line)')

    parser.add_argument('--resolvers',
                        default=','.join(Config.DEFAULT_RESOLVERS),
                        help='Comma-separated list of DNS resolvers (default: %(default)s)')

    parser.add_argument('--rate',
                        type=int,
                        default=Config.DEFAULT_RATE,
                        help='Queries per second (default: %(default)s)')

    parser.add_argument('-t', '--timeout',
                        type=float,
                        default=Config.DEFAULT_TIMEOUT,
                        help='Timeout in seconds (default: %(default)s)')

    parser.add_argument('-c', '--concurrent',
                        type=int,
                        default=None,
                        help='Max concurrent lookups (default: unlimited)')

    parser.add_argument('--no-wildcard',
                        action='store_true',
                        help='Disable wildcard detection')

    parser.add_argument('-v', '--verbose',
                        action='store_true',
                        help='Verbose output')

    parser.add_argument('-o', '--output',
                        default=None,
                        help='Output file to save results (appended)')

    parser.add_argument('--version',
                        action='store_true',
                        help='Show version information')

    return parser


def build_config(args: argparse.Namespace) -> EnumeratorConfig:
    """
    Сборка конфигурации из аргументов.

    Raises:
        ConfigError: некорректные параметры или резолверы
    """
    if args.resolver_file:
        resolvers = load_resolvers_from_file(args.resolver_file)
    else:
        resolvers = parse_resolver_list(args.resolvers)
    resolvers = [resolve_resolver_host(r) for r in resolvers]

    if args.domain and not validate_domain(args.domain):
        raise ConfigError(f"Invalid domain name: {args.domain}")

    return EnumeratorConfig(
        resolvers=tuple(resolvers),
        rate=args.rate,
        timeout=args.timeout,
        wildcard_check=not args.no_wildcard,
        verbose=args.verbose,
        output_file=args.output,
        max_concurrent=args.concurrent,
    ).validate()


async def run(args: argparse.Namespace,
              stdin: TextIO,
              stdout: Optional[TextIO] = None) -> int:
    config = build_config(args)

    brute = bool(args.domain and args.wordlist)
    if not brute and stdin.isatty():
        print(Config.USAGE, file=sys.stderr)
        build_parser().print_help(sys.stderr)
        return 1

    enumerator = DNSEnumerator(config, stream=stdout)
    start_time = time.time()
    try:
        if brute:
            await enumerator.bruteforce(args.domain.lower(), args.wordlist)
        else:
            await enumerator.enumerate_from_reader(stdin)
    finally:
        enumerator.close()

    enumerator.log_summary(time.time() - start_time)
    return 0


def main(argv=None) -> int:
    """Главная функция"""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"DNS Tool v{Config.VERSION}")
        return 0

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(message)s',
        stream=sys.stderr,
    )

    try:
        return asyncio.run(run(args, sys.stdin))
    except ConfigError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print(file=sys.stderr)
        print("[!] Interrupted by user", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
